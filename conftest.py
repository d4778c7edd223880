pytest_plugins = ["pytester", "stubkit.pytest_plugin"]
