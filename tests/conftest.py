import pathlib
import sys

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

_CREDENTIAL_VARS = (
    "INWORLD_API_KEY",
    "CARTESIA_API_KEY",
    "ELEVENLABS_API_KEY",
    "HUME_API_KEY",
)


@pytest.fixture(autouse=True)
def _isolate_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real provider keys from the host environment out of tests."""
    for name in _CREDENTIAL_VARS:
        monkeypatch.delenv(name, raising=False)
