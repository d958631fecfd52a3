import machineimage.process

from machineimage.driver import GcloudDriver

def test_machine_image_exists(monkeypatch):
    calls = []

    def run_proc(args, timeout=None):
        calls.append(args)

        return (0, "packer-123\n", "")

    monkeypatch.setattr(machineimage.process, "run_proc", run_proc)

    driver = GcloudDriver(gcloud="gcloud")

    assert driver.machine_image_exists("hashicorp", "packer-123") is True
    assert calls == [[
        "gcloud", "compute", "machine-images", "describe", "packer-123",
        "--project", "hashicorp",
        "--format", "value(name)"
    ]]

def test_machine_image_missing(monkeypatch):
    monkeypatch.setattr(machineimage.process, "run_proc", lambda args, timeout=None: (1, "", "ERROR: (gcloud) NOT_FOUND\n"))

    assert GcloudDriver(gcloud="gcloud").machine_image_exists("hashicorp", "packer-123") is False

def test_missing_gcloud_is_not_found(tmp_path):
    driver = GcloudDriver(gcloud=str(tmp_path / "no-such-gcloud"), timeout=5)

    assert driver.machine_image_exists("hashicorp", "packer-123") is False

def test_gcloud_from_environment(monkeypatch):
    monkeypatch.setenv("MACHINEIMAGE_GCLOUD", "/opt/google-cloud-sdk/bin/gcloud")

    assert GcloudDriver().gcloud == "/opt/google-cloud-sdk/bin/gcloud"
