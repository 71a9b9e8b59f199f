"""End-to-end tests for the patternsmith command line."""
from __future__ import annotations

import json
import textwrap

import pytest

GOOD_DOCUMENT = textwrap.dedent(
    """
    contracts:
      IStorage:
        namespace: shop.io
        members:
          - {name: get, returns: bytes, parameters: [{name: key, type: str}]}
          - {name: put, parameters: [{name: key, type: str}, {name: data, type: bytes}]}
    syntheses:
      - {pattern: decorator, contract: IStorage}
      - {pattern: proxy, contract: IStorage, options: {interceptor_mode: single}}
    """
)

MIXED_DOCUMENT = textwrap.dedent(
    """
    contracts:
      IStorage:
        namespace: shop.io
        members:
          - {name: get, returns: bytes}
      IConverter:
        namespace: shop.io
        members:
          - {name: convert, generic_arity: 1}
    syntheses:
      - {pattern: decorator, contract: IConverter}
      - {pattern: decorator, contract: IStorage}
    """
)


@pytest.fixture(autouse=True)
def _reset_logging():
    from patternsmith.core.logging_setup import reset_logging_for_tests

    yield
    reset_logging_for_tests()


@pytest.fixture
def document(isolated_project_env):
    def _write(text: str, name: str = "shop.yaml"):
        path = isolated_project_env / name
        path.write_text(text, encoding="utf-8")
        return str(path)

    return _write


def _run(*argv: str) -> int:
    from patternsmith.cli._dispatcher import main

    return main(list(argv))


class TestSynthGenerate:
    def test_writes_artifacts(self, document, isolated_project_env) -> None:
        out = isolated_project_env / "build"

        code = _run("synth", "generate", document(GOOD_DOCUMENT), "--out", str(out))

        assert code == 0
        assert sorted(p.name for p in out.iterdir()) == ["storage_decorator.py", "storage_proxy.py"]
        assert "class StorageProxy(IStorage):" in (out / "storage_proxy.py").read_text(encoding="utf-8")

    def test_default_output_directory_from_config(self, document, isolated_project_env, write_project_config) -> None:
        write_project_config("output.yaml", {"output": {"directory": "src/shop/generated"}})

        code = _run("synth", "generate", document(GOOD_DOCUMENT), "--repo-root", str(isolated_project_env))

        assert code == 0
        assert (isolated_project_env / "src" / "shop" / "generated" / "storage_decorator.py").exists()

    def test_failing_request_does_not_block_others(self, document, isolated_project_env, capsys) -> None:
        out = isolated_project_env / "build"

        code = _run("synth", "generate", document(MIXED_DOCUMENT), "--out", str(out), "--json")

        assert code == 1
        payload = json.loads(capsys.readouterr().out)
        assert payload["status"] == "error"
        (batch,) = payload["documents"]
        assert (batch["total"], batch["succeeded"], batch["errors"]) == (2, 1, 1)
        assert [p.name for p in out.iterdir()] == ["storage_decorator.py"]

    def test_dry_run(self, document, isolated_project_env, capsys) -> None:
        out = isolated_project_env / "build"

        code = _run("synth", "generate", document(GOOD_DOCUMENT), "--out", str(out), "--dry-run")

        assert code == 0
        assert not out.exists()
        assert "Would write 2 file(s)" in capsys.readouterr().out

    def test_invalid_document(self, document, capsys) -> None:
        code = _run("synth", "generate", document("contracts: []\n"), "--json")

        assert code == 1
        error = json.loads(capsys.readouterr().err)
        assert error["code"] == "ContractLoadError"


class TestSynthCheck:
    def test_reports_errors(self, document, capsys) -> None:
        code = _run("synth", "check", document(MIXED_DOCUMENT))

        assert code == 1
        out = capsys.readouterr().out
        assert "error PS0201" in out
        assert "Checked 2 request(s): 1 error(s)" in out

    def test_clean_document(self, document, capsys) -> None:
        code = _run("synth", "check", document(GOOD_DOCUMENT), "--json")

        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload == {"status": "success", "errors": 0, "diagnostics": []}


class TestConfigShow:
    def test_show_key(self, isolated_project_env, capsys) -> None:
        code = _run("config", "show", "synthesis.defaults.wrap_order", "--json", "--repo-root", str(isolated_project_env))

        assert code == 0
        assert json.loads(capsys.readouterr().out) == {"synthesis": {"defaults": {"wrap_order": "outer_first"}}}

    def test_missing_key(self, isolated_project_env, capsys) -> None:
        code = _run("config", "show", "synthesis.nope", "--repo-root", str(isolated_project_env))

        assert code == 1
        assert "Key not found: synthesis.nope" in capsys.readouterr().err


class TestDiagnosticsList:
    def test_category_filter(self, capsys) -> None:
        code = _run("diagnostics", "list", "--category", "binding", "--json")

        assert code == 0
        rows = json.loads(capsys.readouterr().out)
        assert [row["id"] for row in rows] == [f"PS030{n}" for n in range(1, 10)]


class TestDispatcher:
    def test_no_domain_prints_help(self, capsys) -> None:
        assert _run() == 0
        assert "synth" in capsys.readouterr().out

    def test_version(self, capsys) -> None:
        with pytest.raises(SystemExit) as excinfo:
            _run("--version")

        assert excinfo.value.code == 0
        assert "patternsmith 0.1.0" in capsys.readouterr().out
