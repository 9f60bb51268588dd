import json
from pathlib import Path
from typing import Any
from typing import Final

import pytest

from appbinder.config import STORAGE_FILE_ENV_VARIABLE
from appbinder.main import main

_DOCUMENT: Final = {
    "page": {"name": "Checkout", "route": "/checkout"},
    "components": [
        {"id": "quantity", "type": "NumberInput", "props": {"value": 3}},
        {"id": "total", "type": "Text", "props": {"text": "Total: {{ widgets.quantity.value * store.price }}"}},
    ],
    "actions": [
        {"id": "double", "type": "runJS", "config": {"code": "widgets.quantity.value * 2"}},
        {"id": "fail", "type": "runJS", "config": {"code": "1 / 0"}},
        {
            "id": "setQuantity",
            "type": "updateWidget",
            "config": {"widgetId": "quantity", "updates": {"value": 5}},
        },
    ],
    "store": {"price": 10},
}


@pytest.fixture(autouse=True)
def _no_storage_file(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(STORAGE_FILE_ENV_VARIABLE, raising=False)


def _write_document(tmp_path: Path, document: Any) -> Path:
    path: Final = tmp_path / "page.json"
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


def test_render_prints_evaluated_components(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code: Final = main([str(_write_document(tmp_path, _DOCUMENT)), "--render"])

    assert exit_code == 0
    components: Final = json.loads(capsys.readouterr().out)
    assert components[1] == {"id": "total", "type": "Text", "props": {"text": "Total: 30"}}


def test_running_actions_prints_results_in_order(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code: Final = main([str(_write_document(tmp_path, _DOCUMENT)), "double", "setQuantity", "double"])

    assert exit_code == 0
    results: Final = json.loads(capsys.readouterr().out)
    assert [entry["id"] for entry in results] == ["double", "setQuantity", "double"]
    assert results[0]["result"] == {"success": True, "data": 6, "error": None}
    assert results[2]["result"] == {"success": True, "data": 10, "error": None}


def test_failing_chain_returns_non_zero(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code: Final = main([str(_write_document(tmp_path, _DOCUMENT)), "fail", "double"])

    assert exit_code == 1
    results: Final = json.loads(capsys.readouterr().out)
    assert results == [{"id": "fail", "result": {"success": False, "data": None, "error": "Division by zero"}}]


@pytest.mark.parametrize("document", [{"components": []}, {"page": {"name": "x"}, "actions": [{"id": "a"}]}])
def test_invalid_documents_are_rejected(tmp_path: Path, document: Any) -> None:
    assert main([str(_write_document(tmp_path, document))]) == 2


def test_missing_document_is_rejected(tmp_path: Path) -> None:
    assert main([str(tmp_path / "missing.json")]) == 2
