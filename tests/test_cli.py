"""Tests for the CLI entry point and settings."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
import respx

import run_crawl
from helpers import BASE_URL
from tree_crawler.config import load_settings
from tree_crawler.errors import SetupError


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    for var in ("CRAWL_BASE_URL", "CRAWL_OUTPUT_DIR", "CRAWL_WORKERS", "CRAWL_REQUEST_DELAY", "CRAWL_LEAF_LABEL", "CRAWL_QUEUE_SIZE"):
        # setenv first so the original state is restored even if load_dotenv sets it
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)


def _argv(out: Path, *extra: str):
    return ["--out", str(out), "--base-url", BASE_URL, "--delay", "0", *extra]


class TestMain:
    def test_full_run(self, tmp_path: Path) -> None:
        out = tmp_path / "output"
        with respx.mock(base_url=BASE_URL) as router:
            router.get("/data/regions/root.json").mock(
                return_value=httpx.Response(200, json={"srs": {"1": {"url": "01", "can": "Barangay"}}})
            )
            router.get("/data/regions/01.json").mock(
                return_value=httpx.Response(200, json={"pps": [{"vbs": [{"url": "0101/p1", "cs": [5, 6]}]}]})
            )
            router.get("/data/results/0101/p1.json").mock(return_value=httpx.Response(200, json={"r": 1}))
            router.get("/data/contests/5.json").mock(return_value=httpx.Response(200, json={"c": 5}))
            router.get("/data/contests/6.json").mock(return_value=httpx.Response(200, json={"c": 6}))

            assert run_crawl.main(_argv(out)) == 0

        assert (out / "root.json").exists()
        assert (out / "Barangay" / "01.json").exists()
        assert (out / "Precinct" / "0101" / "p1.json").exists()
        assert (out / "Contest" / "5.json").exists()
        assert (out / "Contest" / "6.json").exists()

    def test_root_failure_exits_nonzero(self, tmp_path: Path) -> None:
        with respx.mock(base_url=BASE_URL) as router:
            router.get("/data/regions/root.json").mock(return_value=httpx.Response(500))
            assert run_crawl.main(_argv(tmp_path / "output")) == 1

    def test_harvest_only_without_leaf_dir_exits_nonzero(self, tmp_path: Path) -> None:
        assert run_crawl.main(_argv(tmp_path / "output", "--harvest-only")) == 1

    def test_skip_harvest_leaves_flat_resources_alone(self, tmp_path: Path) -> None:
        out = tmp_path / "output"
        with respx.mock(base_url=BASE_URL) as router:
            router.get("/data/regions/root.json").mock(return_value=httpx.Response(200, json={"srs": {}}))
            assert run_crawl.main(_argv(out, "--skip-harvest")) == 0

        assert not (out / "Precinct").exists()

    @pytest.mark.parametrize("value", ["0", "-2", "many"])
    def test_bad_worker_flag_is_rejected_by_parser(self, tmp_path: Path, value: str) -> None:
        with pytest.raises(SystemExit) as exc_info:
            run_crawl.parse_args(_argv(tmp_path, "--workers", value))
        assert exc_info.value.code == 2

    @pytest.mark.parametrize("value", ["abc", "0"])
    def test_bad_worker_env_exits_nonzero(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, value: str) -> None:
        monkeypatch.setenv("CRAWL_WORKERS", value)
        assert run_crawl.main(_argv(tmp_path / "output")) == 1

    def test_phase_flags_are_exclusive(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit):
            run_crawl.parse_args(_argv(tmp_path, "--skip-harvest", "--harvest-only"))


class TestSettings:
    def test_defaults(self) -> None:
        settings = load_settings()
        assert settings.workers == 5
        assert settings.request_delay == 0.5
        assert settings.effective_queue_size == 5
        assert settings.root_path == Path("output") / "root.json"
        assert settings.leaf_dir == Path("output") / "Barangay"

    def test_environment_and_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CRAWL_WORKERS", "8")
        monkeypatch.setenv("CRAWL_LEAF_LABEL", "Municipality")
        settings = load_settings(output_dir="mirror", workers=None)

        assert settings.workers == 8
        assert settings.leaf_dir == Path("mirror") / "Municipality"

    def test_unparsable_environment_value_is_a_setup_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CRAWL_REQUEST_DELAY", "soon")
        with pytest.raises(SetupError):
            load_settings()

    def test_zero_workers_override_is_a_setup_error(self) -> None:
        with pytest.raises(SetupError, match="workers"):
            load_settings(workers=0)

    def test_dotenv_file(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text("CRAWL_REQUEST_DELAY=0.1\n")
        assert load_settings().request_delay == 0.1
