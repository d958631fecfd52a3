import os

import pytest
import yaml

from click.testing import CliRunner

import machineimage
import machineimage.driver

from machineimage.sysexits import EX_CONFIG, EX_NOINPUT, EX_SOFTWARE

@pytest.fixture
def log_config(tmp_path):
    path = tmp_path / "logging.yml"
    path.write_text(yaml.safe_dump({
        "version" : 1,
        "disable_existing_loggers" : False,
        "handlers" : {
            "null" : {
                "class" : "logging.NullHandler"
            }
        },
        "root" : {
            "handlers" : ["null"]
        }
    }))

    return str(path)

@pytest.fixture
def build_file(tmp_path):
    def _create(document):
        path = tmp_path / "build.yml"
        path.write_text(yaml.safe_dump(document))

        return str(path)

    return _create

def _invoke(log_config, tmp_path, *args):
    runner = CliRunner()

    return runner.invoke(machineimage.cli, ["-e", str(tmp_path / ".env"), "--log-config", log_config] + list(args))

def test_validate_prints_normalized_config(tmp_path, log_config, build_file, raw_config):
    result = _invoke(log_config, tmp_path, "validate", "-f", build_file(raw_config))

    assert result.exit_code == 0

    document = yaml.safe_load(result.output)

    assert document["region"] == "us-east1"
    assert document["machine_image"]["name"].startswith("packer-")

def test_validate_invalid_config(tmp_path, log_config, build_file, raw_config):
    raw_config["accelerator_count"] = 1
    raw_config["on_host_maintenance"] = "MIGRATE"

    result = _invoke(log_config, tmp_path, "validate", "-f", build_file(raw_config))

    assert result.exit_code == EX_CONFIG

def test_validate_missing_file(tmp_path, log_config):
    result = _invoke(log_config, tmp_path, "validate", "-f", str(tmp_path / "missing.yml"))

    assert result.exit_code == EX_NOINPUT

def test_validate_reads_environment(tmp_path, log_config, raw_config, monkeypatch):
    monkeypatch.delenv("MACHINEIMAGE_TEST_PROJECT", raising=False)

    (tmp_path / ".env").write_text("MACHINEIMAGE_TEST_PROJECT=from-env\n")

    path = tmp_path / "build.yml"
    path.write_text("project_id: !ENV ${MACHINEIMAGE_TEST_PROJECT}\n" + yaml.safe_dump({key : value for key, value in raw_config.items() if key != "project_id"}))

    try:
        result = _invoke(log_config, tmp_path, "validate", "-f", str(path))

    finally:
        os.environ.pop("MACHINEIMAGE_TEST_PROJECT", None)

    assert result.exit_code == 0
    assert yaml.safe_load(result.output)["project_id"] == "from-env"

@pytest.mark.parametrize("exists,args,exit_code,output", [
    (False, [], 0, "does not exist"),
    (True, [], EX_SOFTWARE, ""),
    (True, ["--force"], 0, "exists (forced)"),
])
def test_check(tmp_path, log_config, build_file, raw_config, monkeypatch, exists, args, exit_code, output):
    monkeypatch.setattr(machineimage.driver.GcloudDriver, "machine_image_exists", lambda self, project_id, name: exists)

    result = _invoke(log_config, tmp_path, "check", "-f", build_file(raw_config), *args)

    assert result.exit_code == exit_code
    assert output in result.output

def test_validate_hides_raw_encryption_key(tmp_path, log_config, build_file, raw_config):
    raw_config["disk_encryption_key"] = {"RawKey" : "SECRETKEYMATERIAL"}

    result = _invoke(log_config, tmp_path, "validate", "-f", build_file(raw_config))

    assert result.exit_code == 0
    assert "SECRETKEYMATERIAL" not in result.output

def test_check_invalid_execution_time(tmp_path, log_config, build_file, raw_config, monkeypatch):
    monkeypatch.setenv("MACHINEIMAGE_EXECUTION_TIME", "soon")
    monkeypatch.setattr(machineimage.driver.GcloudDriver, "machine_image_exists", lambda self, project_id, name: False)

    result = _invoke(log_config, tmp_path, "check", "-f", build_file(raw_config))

    assert result.exit_code == EX_CONFIG
