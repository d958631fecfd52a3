# BSD 3-Clause License
#
# Copyright (c) 2025, Jesús Daniel Colmenares Oviedo <DtxdF@disroot.org>
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
# 1. Redistributions of source code must retain the above copyright notice, this
#    list of conditions and the following disclaimer.
#
# 2. Redistributions in binary form must reproduce the above copyright notice,
#    this list of conditions and the following disclaimer in the documentation
#    and/or other materials provided with the distribution.
#
# 3. Neither the name of the copyright holder nor the names of its
#    contributors may be used to endorse or promote products derived from
#    this software without specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE
# DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE LIABLE
# FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL
# DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR
# SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY,
# OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE
# OF THIS SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.

import machineimage.default
import machineimage.exceptions
import machineimage.util

from machineimage.util import collect

KEYS = (
    "attachment_mode",
    "create_image",
    "device_name",
    "disk_encryption_key",
    "disk_name",
    "interface_type",
    "iops",
    "keep_device",
    "replica_zones",
    "source_volume",
    "throughput",
    "volume_size",
    "volume_type",
    "zone"
)

class BlockDevice:
    def __init__(self):
        self.attachment_mode = machineimage.default.DISK_ATTACHMENT["attachment_mode"]
        self.create_image = False
        self.device_name = ""
        self.disk_encryption_key = {}
        self.disk_name = ""
        self.interface_type = machineimage.default.DISK_ATTACHMENT["interface_type"]
        self.iops = 0
        self.keep_device = False
        self.replica_zones = []
        self.source_volume = ""
        self.throughput = 0
        self.volume_size = 0
        self.volume_type = ""
        self.zone = ""

    def to_dict(self):
        return {
            "attachment_mode" : self.attachment_mode,
            "create_image" : self.create_image,
            "device_name" : self.device_name,
            "disk_encryption_key" : machineimage.util.mask_encryption_key(self.disk_encryption_key),
            "disk_name" : self.disk_name,
            "interface_type" : self.interface_type,
            "iops" : self.iops,
            "keep_device" : self.keep_device,
            "replica_zones" : self.replica_zones,
            "source_volume" : self.source_volume,
            "throughput" : self.throughput,
            "volume_size" : self.volume_size,
            "volume_type" : self.volume_type,
            "zone" : self.zone
        }

    def prepare(self, raw, zone, index=0):
        errs = machineimage.exceptions.MultiError()

        prefix = f"disk_attachment.{index}"

        if not isinstance(raw, dict):
            errs.append(machineimage.exceptions.InvalidSpec(f"'{prefix}' is invalid."))

            return errs

        for key in raw:
            if key not in KEYS:
                errs.append(machineimage.exceptions.InvalidSpec(f"{prefix}.{key}: this key is invalid."))

        self.device_name = collect(errs, machineimage.util.to_str, raw.get("device_name"), f"{prefix}.device_name") or ""
        self.source_volume = collect(errs, machineimage.util.to_str, raw.get("source_volume"), f"{prefix}.source_volume") or ""
        self.create_image = collect(errs, machineimage.util.to_bool, raw.get("create_image"), f"{prefix}.create_image") or False
        self.keep_device = collect(errs, machineimage.util.to_bool, raw.get("keep_device"), f"{prefix}.keep_device") or False
        self.replica_zones = collect(errs, machineimage.util.to_str_list, raw.get("replica_zones"), f"{prefix}.replica_zones") or []
        self.disk_encryption_key = collect(errs, validate_disk_encryption_key, raw.get("disk_encryption_key"), f"{prefix}.disk_encryption_key") or {}

        zone = machineimage.util.get_default(raw.get("zone"), zone)

        self.zone = collect(errs, machineimage.util.to_str, zone, f"{prefix}.zone") or ""

        collect(errs, self._prepare_disk_name, raw, prefix)
        collect(errs, self._prepare_attachment_mode, raw, prefix)
        collect(errs, self._prepare_interface_type, raw, prefix)
        collect(errs, self._prepare_volume_type, raw, prefix)
        collect(errs, self._prepare_volume_size, raw, prefix)
        collect(errs, self._prepare_iops, raw, prefix)
        collect(errs, self._prepare_throughput, raw, prefix)
        collect(errs, self._prepare_replica_zones, prefix)
        collect(errs, self._prepare_scratch, prefix)

        return errs

    def _prepare_disk_name(self, raw, prefix):
        disk_name = machineimage.util.to_str(raw.get("disk_name"), f"{prefix}.disk_name")

        if disk_name == "":
            disk_name = machineimage.default.DISK_ATTACHMENT_NAME

        self.disk_name = machineimage.util.render(disk_name, f"{prefix}.disk_name")

    def _prepare_attachment_mode(self, raw, prefix):
        attachment_mode = machineimage.util.to_str(raw.get("attachment_mode"), f"{prefix}.attachment_mode")

        if attachment_mode == "":
            return

        if attachment_mode not in machineimage.default.DISK_ATTACHMENT["attachment_modes"]:
            raise machineimage.exceptions.InvalidSpec(f"{attachment_mode}: invalid value for '{prefix}.attachment_mode'")

        self.attachment_mode = attachment_mode

    def _prepare_interface_type(self, raw, prefix):
        interface_type = machineimage.util.to_str(raw.get("interface_type"), f"{prefix}.interface_type")

        if interface_type == "":
            return

        if interface_type not in machineimage.default.DISK_ATTACHMENT["interface_types"]:
            raise machineimage.exceptions.InvalidSpec(f"{interface_type}: invalid value for '{prefix}.interface_type'")

        self.interface_type = interface_type

    def _prepare_volume_type(self, raw, prefix):
        volume_type = machineimage.util.to_str(raw.get("volume_type"), f"{prefix}.volume_type")

        if volume_type == "":
            raise machineimage.exceptions.InvalidSpec(f"'{prefix}.volume_type' is required but hasn't been specified.")

        if volume_type not in machineimage.default.DISK_ATTACHMENT["volume_types"]:
            raise machineimage.exceptions.InvalidSpec(f"{volume_type}: invalid value for '{prefix}.volume_type'")

        self.volume_type = volume_type

    def _prepare_volume_size(self, raw, prefix):
        volume_size = raw.get("volume_size")

        if volume_size is None:
            if self.volume_type == "scratch":
                self.volume_size = machineimage.default.DISK_ATTACHMENT["scratch_size"]

            elif self.source_volume == "":
                raise machineimage.exceptions.InvalidSpec(f"'{prefix}.volume_size' is required unless 'source_volume' is set.")

            return

        volume_size = machineimage.util.to_int(volume_size, f"{prefix}.volume_size")

        if volume_size <= 0:
            raise machineimage.exceptions.InvalidSpec(f"{volume_size}: invalid value for '{prefix}.volume_size'")

        self.volume_size = volume_size

    def _prepare_iops(self, raw, prefix):
        iops = raw.get("iops")

        if iops is None:
            return

        self.iops = machineimage.util.to_int(iops, f"{prefix}.iops")

        if self.volume_type not in machineimage.default.DISK_ATTACHMENT["iops_volume_types"]:
            raise machineimage.exceptions.InvalidSpec(f"'{prefix}.iops' cannot be set for volume type '{self.volume_type}'.")

    def _prepare_throughput(self, raw, prefix):
        throughput = raw.get("throughput")

        if throughput is None:
            return

        self.throughput = machineimage.util.to_int(throughput, f"{prefix}.throughput")

        if self.volume_type not in machineimage.default.DISK_ATTACHMENT["throughput_volume_types"]:
            raise machineimage.exceptions.InvalidSpec(f"'{prefix}.throughput' cannot be set for volume type '{self.volume_type}'.")

    def _prepare_replica_zones(self, prefix):
        if len(self.replica_zones) == 0:
            return

        expected = machineimage.default.DISK_ATTACHMENT["replica_zones"]

        if len(self.replica_zones) != expected:
            raise machineimage.exceptions.InvalidSpec(f"'{prefix}.replica_zones': exactly {expected} zones must be specified.")

    def _prepare_scratch(self, prefix):
        if self.volume_type != "scratch":
            return

        scratch_size = machineimage.default.DISK_ATTACHMENT["scratch_size"]

        if self.volume_size != scratch_size:
            raise machineimage.exceptions.InvalidSpec(f"'{prefix}.volume_size': scratch disks must be {scratch_size} GB.")

        if self.attachment_mode != "READ_WRITE":
            raise machineimage.exceptions.InvalidSpec(f"'{prefix}.attachment_mode': scratch disks must be attached as READ_WRITE.")

        if self.source_volume != "":
            raise machineimage.exceptions.InvalidSpec(f"'{prefix}.source_volume' cannot be used with scratch disks.")

        if self.create_image:
            raise machineimage.exceptions.InvalidSpec(f"'{prefix}.create_image' cannot be used with scratch disks.")

def validate_disk_encryption_key(document, key):
    if document is None:
        return {}

    if not isinstance(document, dict):
        raise machineimage.exceptions.InvalidSpec(f"'{key}' is invalid.")

    for name in document:
        if name not in machineimage.default.DISK_ENCRYPTION_KEY_KEYS:
            raise machineimage.exceptions.InvalidSpec(f"{key}.{name}: this key is invalid.")

    return machineimage.util.to_str_dict(document, key)

def prepare_disk_attachments(entries, zone):
    """
    Returns a tuple (block_devices, image_source_disk, errs). Only a single
    attachment may be used as the source of the machine image.
    """

    errs = machineimage.exceptions.MultiError()

    block_devices = []
    image_source_disk = ""

    if entries is None:
        return (block_devices, image_source_disk, errs)

    if not isinstance(entries, list):
        errs.append(machineimage.exceptions.InvalidSpec("'disk_attachment' is invalid."))

        return (block_devices, image_source_disk, errs)

    for index, entry in enumerate(entries):
        block_device = BlockDevice()

        errs.append(block_device.prepare(entry, zone, index))

        if block_device.create_image:
            if image_source_disk != "":
                errs.append(machineimage.exceptions.InvalidSpec(f"'disk_attachment.{index}.create_image': only one disk attachment can be used to create the machine image."))

            else:
                image_source_disk = block_device.disk_name

        block_devices.append(block_device)

    return (block_devices, image_source_disk, errs)
