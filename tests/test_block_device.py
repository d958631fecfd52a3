import pytest

from machineimage.block_device import BlockDevice, prepare_disk_attachments

def _prepare(raw, zone="us-east1-a"):
    block_device = BlockDevice()

    errs = block_device.prepare(raw, zone)

    return (block_device, errs)

def test_scratch_defaults():
    (block_device, errs) = _prepare({"volume_type" : "scratch"})

    assert len(errs) == 0
    assert block_device.volume_size == 375
    assert block_device.attachment_mode == "READ_WRITE"
    assert block_device.interface_type == "SCSI"
    assert block_device.zone == "us-east1-a"
    assert block_device.disk_name.startswith("packer-")

def test_zone_can_be_overridden():
    (block_device, errs) = _prepare({"volume_type" : "pd-ssd", "volume_size" : 10, "zone" : "us-east1-b"})

    assert len(errs) == 0
    assert block_device.zone == "us-east1-b"

@pytest.mark.parametrize("raw", [
    {"volume_type" : "scratch", "volume_size" : 100},
    {"volume_type" : "scratch", "attachment_mode" : "READ_ONLY"},
    {"volume_type" : "scratch", "source_volume" : "disk"},
    {"volume_type" : "scratch", "create_image" : True},
    {"volume_type" : "pd-standard"},
    {"volume_type" : "floppy", "volume_size" : 1},
    {"volume_size" : 10},
    {"volume_type" : "pd-standard", "volume_size" : 10, "nonsense" : True},
    {"volume_type" : "pd-standard", "volume_size" : 10, "interface_type" : "IDE"},
    {"volume_type" : "pd-standard", "volume_size" : 10, "iops" : 1000},
    {"volume_type" : "pd-extreme", "volume_size" : 10, "throughput" : 100},
    {"volume_type" : "pd-standard", "volume_size" : 10, "replica_zones" : ["us-east1-b"]},
    {"volume_type" : "pd-standard", "volume_size" : 10, "disk_encryption_key" : {"nope" : "x"}},
])
def test_invalid_attachments(raw):
    (block_device, errs) = _prepare(raw)

    assert len(errs) > 0

@pytest.mark.parametrize("raw", [
    {"volume_type" : "pd-standard", "source_volume" : "existing-disk"},
    {"volume_type" : "pd-extreme", "volume_size" : 10, "iops" : 1000},
    {"volume_type" : "hyperdisk-throughput", "volume_size" : 10, "throughput" : 100},
    {"volume_type" : "pd-balanced", "volume_size" : "10", "replica_zones" : ["us-east1-b", "us-east1-c"]},
    {"volume_type" : "pd-ssd", "volume_size" : 10, "interface_type" : "NVME", "attachment_mode" : "READ_ONLY"},
])
def test_valid_attachments(raw):
    (block_device, errs) = _prepare(raw)

    assert len(errs) == 0

def test_prepare_disk_attachments_single_source_disk():
    entries = [
        {"volume_type" : "scratch"},
        {"volume_type" : "pd-standard", "volume_size" : 20, "disk_name" : "second-disk", "create_image" : True}
    ]

    (block_devices, image_source_disk, errs) = prepare_disk_attachments(entries, "us-east1-a")

    assert len(errs) == 0
    assert len(block_devices) == 2
    assert image_source_disk == "second-disk"

def test_prepare_disk_attachments_rejects_second_source_disk():
    entries = [
        {"volume_type" : "pd-standard", "volume_size" : 20, "disk_name" : "second-disk", "create_image" : True},
        {"volume_type" : "pd-standard", "volume_size" : 20, "disk_name" : "third-disk", "create_image" : True}
    ]

    (block_devices, image_source_disk, errs) = prepare_disk_attachments(entries, "us-east1-a")

    assert len(errs) == 1
    assert image_source_disk == "second-disk"

def test_prepare_disk_attachments_not_a_list():
    (block_devices, image_source_disk, errs) = prepare_disk_attachments({"volume_type" : "scratch"}, "us-east1-a")

    assert len(errs) == 1
    assert block_devices == []
