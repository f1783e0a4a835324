# tests/test_scripts.py

"""
scripts/*.py 모듈 로딩 테스트.
"""

import importlib.util
import sys
from pathlib import Path

import dotenv
import pytest

SCRIPTS_DIR = Path(__file__).parent.parent / "scripts"


@pytest.mark.parametrize("script", ["collect_metrics.py", "generate_metrics.py"])
def test_dotenv_loaded_before_settings(script, monkeypatch):
    """.env 로드가 settings 생성보다 먼저 일어나야 한다."""
    calls = []
    monkeypatch.setattr(dotenv, "load_dotenv", lambda *a, **kw: calls.append("devdash.config.settings" in sys.modules))
    monkeypatch.delitem(sys.modules, "devdash.config.settings", raising=False)

    spec = importlib.util.spec_from_file_location(f"script_{Path(script).stem}", SCRIPTS_DIR / script)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    assert calls == [False]
    assert callable(module.main)
