"""
Tests for CLI module.
"""

from __future__ import annotations

import json
import logging

import httpx
import pytest
from click.testing import CliRunner

from dxport.cli import main

PROJECT = "project-" + "A" * 24
OTHER_PROJECT = "project-" + "B" * 24


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger = logging.getLogger("dxport")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def invoke(settings, platform, tmp_path, monkeypatch):
    """Run the CLI against the fake platform from inside tmp_path."""
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()

    def run(*args: str, **overrides):
        obj = {
            "settings": settings.model_copy(update=overrides),
            "transport": httpx.MockTransport(platform.handler),
        }
        return runner.invoke(main, list(args), obj=obj)

    return run


class TestCLIMain:
    """Test main CLI group."""

    def test_help(self):
        result = CliRunner().invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "upload" in result.output
        assert "download" in result.output

    def test_version(self):
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "version" in result.output

    def test_debug_logging(self, invoke):
        result = invoke("--debug", "pwd")
        assert result.exit_code == 0
        assert logging.getLogger("dxport").level == logging.DEBUG


class TestCLIUpload:
    """Test upload command."""

    def test_upload_help(self):
        result = CliRunner().invoke(main, ["upload", "--help"])
        assert result.exit_code == 0
        assert "--recursive" in result.output
        assert "--parents" in result.output

    def test_upload(self, invoke, platform, tmp_path):
        (tmp_path / "a.txt").write_bytes(b"hello")

        result = invoke("upload", "a.txt", "--path", f"{PROJECT}:/in")

        assert result.exit_code == 0, result.output
        object_id, = platform.objects
        assert f"a.txt => {object_id}" in result.output
        assert platform.objects[object_id]["folder"] == "/in"
        assert platform.objects[object_id]["data"] == b"hello"

    def test_upload_defaults_to_working_folder(self, invoke, platform, tmp_path):
        (tmp_path / "a.txt").write_bytes(b"hello")

        result = invoke("upload", "a.txt", cli_wd="/work")

        assert result.exit_code == 0, result.output
        (obj,) = platform.objects.values()
        assert obj["folder"] == "/work"

    def test_upload_empty_file(self, invoke, tmp_path):
        (tmp_path / "empty.txt").write_bytes(b"")

        result = invoke("upload", "empty.txt")

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "is empty" in result.output

    def test_upload_directory_without_recursive(self, invoke, tmp_path):
        (tmp_path / "dir").mkdir()

        result = invoke("upload", "dir")

        assert result.exit_code == 1
        assert "recursive" in result.output

    def test_upload_no_project(self, invoke, tmp_path):
        (tmp_path / "a.txt").write_bytes(b"x")

        result = invoke("upload", "a.txt", project_context_id="")

        assert result.exit_code == 1
        assert "No project selected" in result.output

    def test_upload_not_logged_in(self, invoke, tmp_path):
        (tmp_path / "a.txt").write_bytes(b"x")

        result = invoke("upload", "a.txt", auth_token="")

        assert result.exit_code == 1
        assert "Please login" in result.output


class TestCLIDownload:
    """Test download command."""

    def test_download(self, invoke, platform, tmp_path):
        platform.add_file("reads.fq", b"ACGT", folder="/data")

        result = invoke("download", "/data/reads.fq", "--dir", "out", "-q")

        assert result.exit_code == 0, result.output
        assert (tmp_path / "out" / "reads.fq").read_bytes() == b"ACGT"

    def test_download_with_progress(self, invoke, platform, tmp_path):
        platform.add_file("reads.fq", b"ACGT")

        result = invoke("download", "reads.fq")

        assert result.exit_code == 0, result.output
        assert (tmp_path / "reads.fq").read_bytes() == b"ACGT"

    def test_download_to_stdout(self, invoke, platform):
        platform.add_file("reads.fq", b"ACGT")

        result = invoke("download", "reads.fq", "--output", "-", "-q")

        assert result.exit_code == 0
        assert result.stdout_bytes == b"ACGT"

    def test_download_missing(self, invoke):
        result = invoke("download", "/nope.txt", "-q")

        assert result.exit_code == 1
        assert 'Cannot find file or folder "/nope.txt"' in result.output

    def test_download_existing_without_force(self, invoke, platform, tmp_path):
        platform.add_file("reads.fq", b"new")
        (tmp_path / "reads.fq").write_bytes(b"old")

        result = invoke("download", "reads.fq", "-q")

        assert result.exit_code == 1
        assert "force" in result.output
        assert (tmp_path / "reads.fq").read_bytes() == b"old"

    def test_download_recursive(self, invoke, platform, tmp_path):
        platform.add_file("a.txt", b"a", folder="/run")
        platform.add_file("b.txt", b"b", folder="/run/sub")

        result = invoke("download", "-r", "run", "-q")

        assert result.exit_code == 0, result.output
        assert (tmp_path / "run" / "a.txt").read_bytes() == b"a"
        assert (tmp_path / "run" / "sub" / "b.txt").read_bytes() == b"b"


class TestCLIJobs:
    """Test download-inputs and upload-outputs commands."""

    @pytest.fixture
    def app_json(self, tmp_path):
        path = tmp_path / "dxapp.json"
        path.write_text(
            json.dumps(
                {
                    "outputSpec": [
                        {"name": "bam", "class": "file", "optional": False},
                        {"name": "logs", "class": "array:file"},
                    ]
                }
            )
        )
        return path

    def test_download_inputs(self, invoke, platform, tmp_path):
        reads = [platform.add_file(f"r{i}.fq", b"ACGT") for i in range(2)]
        (tmp_path / "job_input.json").write_text(
            json.dumps({"reads": [{"$dnanexus_link": r} for r in reads], "n": 3})
        )

        result = invoke(
            "download-inputs", "-i", "job_input.json", "-o", "inputs", "--parallel", "-q"
        )

        assert result.exit_code == 0, result.output
        assert (tmp_path / "inputs/reads/0/r0.fq").read_bytes() == b"ACGT"
        assert (tmp_path / "inputs/reads/1/r1.fq").read_bytes() == b"ACGT"

    def test_download_inputs_defaults_to_home(self, invoke, platform, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        reads = platform.add_file("r.fq", b"ACGT")
        (tmp_path / "job_input.json").write_text(json.dumps({"reads": {"$dnanexus_link": reads}}))

        result = invoke("download-inputs", "--except", "other")

        assert result.exit_code == 0, result.output
        assert (tmp_path / "in/reads/r.fq").read_bytes() == b"ACGT"

    def test_download_inputs_missing_document(self, invoke):
        result = invoke("download-inputs", "-i", "nope.json", "-q")

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "nope.json" in result.output

    def test_upload_outputs(self, invoke, platform, tmp_path, app_json):
        (tmp_path / "out/bam").mkdir(parents=True)
        (tmp_path / "out/bam/x.bam").write_bytes(b"bam")

        result = invoke(
            "upload-outputs", "-a", str(app_json), "-o", "out", "--path", f"{PROJECT}:/res"
        )

        assert result.exit_code == 0, result.output
        (object_id,) = platform.objects
        assert json.loads(result.output) == {"bam": {"$dnanexus_link": object_id}}
        assert platform.objects[object_id]["folder"] == "/res"

    def test_upload_outputs_app_json_from_env(
        self, invoke, platform, tmp_path, app_json, monkeypatch
    ):
        monkeypatch.setenv("DX_TEST_DXAPP_JSON", str(app_json))
        (tmp_path / "out/bam").mkdir(parents=True)
        (tmp_path / "out/bam/x.bam").write_bytes(b"bam")

        result = invoke("upload-outputs", "-o", "out", "--output-json", "job_output.json")

        assert result.exit_code == 0, result.output
        (object_id,) = platform.objects
        assert platform.objects[object_id]["folder"] == "/"
        saved = json.loads((tmp_path / "job_output.json").read_text())
        assert saved == {"bam": {"$dnanexus_link": object_id}}

    def test_upload_outputs_missing_required(self, invoke, platform, tmp_path, app_json):
        (tmp_path / "out/logs").mkdir(parents=True)
        (tmp_path / "out/logs/a.log").write_bytes(b"a")

        result = invoke("upload-outputs", "-a", str(app_json), "-o", "out")

        assert result.exit_code == 1
        assert 'Required output "bam" has no files' in result.output
        assert platform.objects == {}

    def test_upload_outputs_failed_file(self, invoke, tmp_path, app_json):
        (tmp_path / "out/bam").mkdir(parents=True)
        (tmp_path / "out/bam/x.bam").write_bytes(b"")

        result = invoke("upload-outputs", "-a", str(app_json), "-o", "out")

        assert result.exit_code == 1
        assert "is empty" in result.output


class TestCLINavigation:
    """Test find-data, ls, pwd and cd."""

    def test_find_data(self, invoke, platform):
        platform.add_file("reads.fq", b"ACGT", folder="/data")
        platform.add_file("notes.txt", b"x", folder="/data")

        result = invoke("find-data", "--name", "*.fq")

        assert result.exit_code == 0, result.output
        assert "reads.fq" in result.output
        assert "notes.txt" not in result.output

    def test_find_data_no_match(self, invoke):
        result = invoke("find-data", "--name", "*.bam")
        assert result.exit_code == 0
        assert "No matching files" in result.output

    def test_ls(self, invoke, platform):
        platform.add_folder(PROJECT, "/data/sub")
        platform.add_file("reads.fq", b"x", folder="/data")

        result = invoke("ls", "data")

        assert result.exit_code == 0, result.output
        assert "sub/" in result.output
        assert "reads.fq" in result.output

    def test_pwd(self, invoke):
        result = invoke("pwd", cli_wd="/data")
        assert result.exit_code == 0
        assert result.output.strip() == "demo:/data"

    def test_pwd_no_project(self, invoke):
        result = invoke("pwd", project_context_id="")
        assert result.exit_code == 1

    def test_cd(self, invoke, platform, conf_dir):
        platform.add_folder(PROJECT, "/data/sub")

        result = invoke("cd", "data/sub")

        assert result.exit_code == 0, result.output
        saved = json.loads((conf_dir / "dx_env.json").read_text())
        assert saved["cli_wd"] == "/data/sub"
        assert saved["project_context_id"] == PROJECT

    def test_cd_parent(self, invoke, platform, conf_dir):
        platform.add_folder(PROJECT, "/data/sub")

        result = invoke("cd", "..", cli_wd="/data/sub")

        assert result.exit_code == 0, result.output
        assert json.loads((conf_dir / "dx_env.json").read_text())["cli_wd"] == "/data"

    def test_cd_other_project(self, invoke, platform, conf_dir):
        platform.add_folder(OTHER_PROJECT, "/x")

        result = invoke("cd", f"{OTHER_PROJECT}:/x")

        assert result.exit_code == 0, result.output
        saved = json.loads((conf_dir / "dx_env.json").read_text())
        assert saved["project_context_id"] == OTHER_PROJECT
        assert saved["cli_wd"] == "/x"

    def test_cd_missing_folder(self, invoke, conf_dir):
        result = invoke("cd", "/nope")

        assert result.exit_code == 1
        assert "No such folder" in result.output
        assert not (conf_dir / "dx_env.json").exists()
