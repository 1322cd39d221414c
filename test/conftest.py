import sys
from pathlib import Path

import pytest

from katago_bridge.settings import Settings

# 用 python 自身扮演引擎: 把 stdin 的每一行转成大写写回 stdout
ECHO_ENGINE = (
    "import sys\n"
    "for line in sys.stdin:\n"
    "    sys.stdout.write(line.upper())\n"
    "    sys.stdout.flush()\n"
)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        BINARY_DIR=str(tmp_path / "KataGo"),
        MODEL="model.bin.gz",
        MODEL_DIR=str(tmp_path),
        STAGING_DIR=str(tmp_path / "staging"),
        BINARIES_URL="https://example.com/releases/",
        MODELS_URL="https://example.com/models",
        VARIANT="cpu",
        TERMINATE_GRACE=2.0,
    )


@pytest.fixture
def echo_engine_args():
    return [sys.executable, "-u", "-c", ECHO_ENGINE]
