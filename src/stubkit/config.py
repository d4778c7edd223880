import tomllib
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class StubkitConfig:
    """In-memory representation of the `[tool.stubkit]` table.

    Example pyproject.toml:
      [tool.stubkit]
      # Verify doubles registered with the stub_registry fixture at teardown
      auto_verify = true
    """

    auto_verify: bool

    @staticmethod
    def default() -> "StubkitConfig":
        return StubkitConfig(auto_verify=True)


def load_config(project_root: Path) -> StubkitConfig:
    """Load `[tool.stubkit]` from project_root/pyproject.toml if present.

    Args:
        project_root: Directory containing pyproject.toml

    Returns:
        StubkitConfig with parsed values, or defaults if the file or table is missing

    Raises:
        ValueError: If a setting has the wrong type
    """
    cfg_path = project_root / "pyproject.toml"
    if not cfg_path.exists():
        return StubkitConfig.default()

    data = tomllib.loads(cfg_path.read_text(encoding="utf-8"))
    table = data.get("tool", {}).get("stubkit", {})

    auto_verify = table.get("auto_verify", True)
    if not isinstance(auto_verify, bool):
        raise ValueError(
            f"[tool.stubkit] auto_verify must be true or false, got {auto_verify!r} in {cfg_path}"
        )
    return StubkitConfig(auto_verify=auto_verify)
