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

import json
import logging
import os
import re

import pyaml_env

import machineimage.block_device
import machineimage.communicator
import machineimage.default
import machineimage.exceptions
import machineimage.iap
import machineimage.util

from machineimage.util import collect

logger = logging.getLogger(__name__)

ZONE_REGEX = re.compile(r"^(.+)-[a-z]$")

KEYS = (
    "project_id",
    "zone",
    "region",
    "machine_image_name",
    "machine_image_description",
    "machine_image_storage_locations",
    "machine_image_guest_flush",
    "credentials_file",
    "credentials_json",
    "access_token",
    "impersonate_service_account",
    "use_os_login",
    "source_image",
    "source_image_family",
    "source_image_project_id",
    "instance_name",
    "machine_type",
    "disk_name",
    "disk_size",
    "disk_type",
    "network",
    "network_project_id",
    "subnetwork",
    "address",
    "tags",
    "labels",
    "metadata",
    "metadata_files",
    "startup_script_file",
    "min_cpu_platform",
    "preemptible",
    "use_internal_ip",
    "omit_external_ip",
    "node_affinity",
    "scopes",
    "enable_secure_boot",
    "enable_vtpm",
    "enable_integrity_monitoring",
    "disk_attachment",
    "accelerator_type",
    "accelerator_count",
    "on_host_maintenance",
    "service_account_email",
    "disable_default_service_account",
    "disk_encryption_key",
    "use_iap",
    "iap_localhost_port",
    "iap_hashbang",
    "iap_ext",
    "iap_tunnel_launch_wait",
    "state_timeout",
    "wait_to_add_ssh_keys"
) + machineimage.communicator.KEYS + machineimage.default.PACKER_KEYS

STRING_KEYS = (
    "machine_image_description",
    "impersonate_service_account",
    "source_image",
    "source_image_family",
    "machine_type",
    "disk_type",
    "network",
    "network_project_id",
    "subnetwork",
    "address",
    "min_cpu_platform",
    "accelerator_type",
    "service_account_email",
    "iap_hashbang",
    "iap_ext"
)

BOOL_KEYS = (
    "machine_image_guest_flush",
    "use_os_login",
    "preemptible",
    "use_internal_ip",
    "omit_external_ip",
    "enable_secure_boot",
    "enable_vtpm",
    "enable_integrity_monitoring",
    "disable_default_service_account",
    "use_iap",
    "packer_force",
    "packer_debug"
)

class Config:
    """
    Build settings for a machine image.

    Call `prepare()` with the raw key/value mapping written by the user. Every
    field is checked in a single pass, so the returned error (if any) lists
    all of the problems found at once.
    """

    def __init__(self):
        self.project_id = ""
        self.zone = ""
        self.region = ""

        self.machine_image_name = ""
        self.machine_image_description = ""
        self.machine_image_storage_locations = []
        self.machine_image_guest_flush = False

        self.credentials_file = ""
        self.credentials_json = ""
        self.access_token = ""
        self.impersonate_service_account = ""
        self.use_os_login = False
        self.account = None

        self.source_image = ""
        self.source_image_family = ""
        self.source_image_project_id = []

        self.instance_name = ""
        self.machine_type = ""
        self.disk_name = ""
        self.disk_size = 0
        self.disk_type = ""
        self.network = ""
        self.network_project_id = ""
        self.subnetwork = ""
        self.address = ""
        self.tags = []
        self.labels = {}
        self.metadata = {}
        self.metadata_files = {}
        self.startup_script_file = ""
        self.min_cpu_platform = ""
        self.preemptible = False
        self.use_internal_ip = False
        self.omit_external_ip = False
        self.node_affinity = []
        self.scopes = []
        self.enable_secure_boot = False
        self.enable_vtpm = False
        self.enable_integrity_monitoring = False

        self.extra_block_devices = []
        self.image_source_disk = ""

        self.accelerator_type = ""
        self.accelerator_count = 0
        self.on_host_maintenance = ""

        self.service_account_email = ""
        self.disable_default_service_account = False

        self.disk_encryption_key = {}

        self.use_iap = False
        self.iap_localhost_port = 0
        self.iap_hashbang = ""
        self.iap_ext = ""
        self.iap_tunnel_launch_wait = 0

        self.state_timeout = 0.0
        self.wait_to_add_ssh_keys = 0.0

        self.packer_force = False
        self.packer_debug = False
        self.packer_config = {}

        self.comm = machineimage.communicator.Config()

        self.machine_image_already_exists = False

    def prepare(self, raw):
        warnings = []
        errs = machineimage.exceptions.MultiError()

        if not isinstance(raw, dict):
            errs.append(machineimage.exceptions.InvalidSpec("The configuration is invalid."))

            return (warnings, errs)

        for key in raw:
            if key not in KEYS:
                errs.append(machineimage.exceptions.InvalidSpec(f"{key}: this key is invalid."))

        for key in STRING_KEYS:
            setattr(self, key, collect(errs, machineimage.util.to_str, raw.get(key), key) or "")

        for key in BOOL_KEYS:
            setattr(self, key, collect(errs, machineimage.util.to_bool, raw.get(key), key) or False)

        collect(errs, self._prepare_packer_config, raw)
        collect(errs, self._prepare_project_id, raw)
        collect(errs, self._prepare_zone, raw)
        collect(errs, self._prepare_region, raw)
        collect(errs, self._prepare_machine_image_name, raw)
        collect(errs, self._prepare_machine_image_storage_locations, raw)
        collect(errs, self._prepare_credentials, raw)
        collect(errs, self._prepare_source_image, raw)
        collect(errs, self._prepare_instance, raw)
        collect(errs, self._prepare_disk, raw)
        collect(errs, self._prepare_network, raw)
        collect(errs, self._prepare_metadata, raw)
        collect(errs, self._prepare_metadata_files, raw)
        collect(errs, self._prepare_startup_script_file, raw)
        collect(errs, self._prepare_node_affinity, raw)
        collect(errs, self._prepare_scopes, raw)
        collect(errs, self._prepare_shielded_vm)
        collect(errs, self._prepare_on_host_maintenance, raw)
        collect(errs, self._prepare_accelerator, raw)
        collect(errs, self._prepare_service_account)
        collect(errs, self._prepare_disk_encryption_key, raw)
        self._prepare_timeouts(raw, errs)

        (self.extra_block_devices, self.image_source_disk, block_device_errs) = machineimage.block_device.prepare_disk_attachments(raw.get("disk_attachment"), self.zone)

        errs.append(block_device_errs)

        errs.append(self.comm.prepare(raw))

        collect(errs, self._prepare_iap, raw)

        if len(errs) > 0:
            logger.debug("configuration has %d error(s)", len(errs))

            return (warnings, errs)

        return (warnings, None)

    def to_dict(self):
        return {
            "project_id" : self.project_id,
            "zone" : self.zone,
            "region" : self.region,
            "machine_image" : {
                "name" : self.machine_image_name,
                "description" : self.machine_image_description,
                "storage_locations" : self.machine_image_storage_locations,
                "guest_flush" : self.machine_image_guest_flush,
                "source_disk" : self.image_source_disk
            },
            "source_image" : self.source_image,
            "source_image_family" : self.source_image_family,
            "source_image_project_id" : self.source_image_project_id,
            "instance_name" : self.instance_name,
            "machine_type" : self.machine_type,
            "disk" : {
                "name" : self.disk_name,
                "size" : self.disk_size,
                "type" : self.disk_type,
                "encryption_key" : machineimage.util.mask_encryption_key(self.disk_encryption_key)
            },
            "disk_attachment" : [block_device.to_dict() for block_device in self.extra_block_devices],
            "network" : self.network,
            "network_project_id" : self.network_project_id,
            "subnetwork" : self.subnetwork,
            "tags" : self.tags,
            "labels" : self.labels,
            "scopes" : self.scopes,
            "service_account_email" : self.service_account_email,
            "disable_default_service_account" : self.disable_default_service_account,
            "on_host_maintenance" : self.on_host_maintenance,
            "preemptible" : self.preemptible,
            "accelerator" : {
                "type" : self.accelerator_type,
                "count" : self.accelerator_count
            },
            "iap" : {
                "enabled" : self.use_iap,
                "localhost_port" : self.iap_localhost_port,
                "hashbang" : self.iap_hashbang,
                "ext" : self.iap_ext,
                "tunnel_launch_wait" : self.iap_tunnel_launch_wait
            },
            "state_timeout" : self.state_timeout,
            "wait_to_add_ssh_keys" : self.wait_to_add_ssh_keys,
            "communicator" : self.comm.to_dict(),
            "force" : self.packer_force
        }

    def _prepare_packer_config(self, raw):
        for key in machineimage.default.PACKER_KEYS:
            value = raw.get(key)

            if value is None:
                continue

            self.packer_config[key] = value

    def _prepare_project_id(self, raw):
        self.project_id = machineimage.util.to_str(raw.get("project_id"), "project_id")

        if self.project_id == "":
            raise machineimage.exceptions.InvalidSpec("'project_id' is required but hasn't been specified.")

    def _prepare_zone(self, raw):
        self.zone = machineimage.util.to_str(raw.get("zone"), "zone")

        if self.zone == "":
            raise machineimage.exceptions.InvalidSpec("'zone' is required but hasn't been specified.")

    def _prepare_region(self, raw):
        self.region = machineimage.util.to_str(raw.get("region"), "region")

        if self.region != "":
            return

        self.region = get_region(self.zone)

    def _prepare_machine_image_name(self, raw):
        machine_image_name = machineimage.util.to_str(raw.get("machine_image_name"), "machine_image_name")

        if machine_image_name == "":
            machine_image_name = machineimage.default.MACHINE_IMAGE_NAME

        self.machine_image_name = machineimage.util.render(machine_image_name, "machine_image_name")

    def _prepare_machine_image_storage_locations(self, raw):
        locations = machineimage.util.to_str_list(raw.get("machine_image_storage_locations"), "machine_image_storage_locations")

        if len(locations) > 1:
            raise machineimage.exceptions.InvalidSpec("'machine_image_storage_locations': at most one location can be specified.")

        self.machine_image_storage_locations = locations

    def _prepare_credentials(self, raw):
        self.credentials_file = machineimage.util.to_str(raw.get("credentials_file"), "credentials_file")
        self.credentials_json = machineimage.util.to_str(raw.get("credentials_json"), "credentials_json")
        self.access_token = machineimage.util.to_str(raw.get("access_token"), "access_token")

        given = [key for key in ("credentials_file", "credentials_json", "access_token") if getattr(self, key) != ""]

        if len(given) > 1:
            raise machineimage.exceptions.InvalidSpec("Only one of 'credentials_file', 'credentials_json' or 'access_token' can be specified.")

        if self.credentials_file != "":
            try:
                with open(self.credentials_file) as fd:
                    self.account = json.load(fd)

            except OSError as err:
                raise machineimage.exceptions.InvalidSpec(f"{self.credentials_file}: 'credentials_file' cannot be read: {err}")

            except ValueError as err:
                raise machineimage.exceptions.InvalidSpec(f"{self.credentials_file}: 'credentials_file' is not valid JSON: {err}")

        elif self.credentials_json != "":
            try:
                self.account = json.loads(self.credentials_json)

            except ValueError as err:
                raise machineimage.exceptions.InvalidSpec(f"'credentials_json' is not valid JSON: {err}")

    def _prepare_source_image(self, raw):
        self.source_image_project_id = machineimage.util.to_str_list(raw.get("source_image_project_id"), "source_image_project_id")

        if self.source_image == "" \
                and self.source_image_family == "":
            raise machineimage.exceptions.InvalidSpec("A 'source_image' or 'source_image_family' must be specified.")

    def _prepare_instance(self, raw):
        instance_name = machineimage.util.to_str(raw.get("instance_name"), "instance_name")

        if instance_name == "":
            instance_name = machineimage.default.INSTANCE_NAME

        self.instance_name = machineimage.util.render(instance_name, "instance_name")

        if self.machine_type == "":
            self.machine_type = machineimage.default.MACHINE_TYPE

        self.tags = machineimage.util.to_str_list(raw.get("tags"), "tags")
        self.labels = machineimage.util.to_str_dict(raw.get("labels"), "labels")

    def _prepare_disk(self, raw):
        disk_name = machineimage.util.to_str(raw.get("disk_name"), "disk_name")

        if disk_name == "":
            self.disk_name = self.instance_name

        else:
            self.disk_name = machineimage.util.render(disk_name, "disk_name")

        if self.disk_type == "":
            self.disk_type = machineimage.default.DISK_TYPE

        disk_size = raw.get("disk_size")

        if disk_size is None:
            self.disk_size = machineimage.default.DISK_SIZE

            return

        self.disk_size = machineimage.util.to_int(disk_size, "disk_size")

        if self.disk_size <= 0:
            raise machineimage.exceptions.InvalidSpec(f"{self.disk_size}: invalid value for 'disk_size'")

    def _prepare_network(self, raw):
        if self.network == "" \
                and self.subnetwork == "":
            self.network = machineimage.default.NETWORK

        if self.omit_external_ip \
                and not self.use_internal_ip:
            raise machineimage.exceptions.InvalidSpec("'use_internal_ip' must be true if 'omit_external_ip' is true.")

    def _prepare_metadata(self, raw):
        self.metadata = machineimage.util.to_str_dict(raw.get("metadata"), "metadata")

    def _prepare_metadata_files(self, raw):
        self.metadata_files = machineimage.util.to_str_dict(raw.get("metadata_files"), "metadata_files")

        missing = []

        for key, path in self.metadata_files.items():
            if not os.path.isfile(path):
                missing.append(f"{key}={path}")

        if missing:
            raise machineimage.exceptions.InvalidSpec(f"'metadata_files': cannot find: {', '.join(missing)}")

    def _prepare_startup_script_file(self, raw):
        self.startup_script_file = machineimage.util.to_str(raw.get("startup_script_file"), "startup_script_file")

        if self.startup_script_file == "":
            return

        if not os.path.isfile(self.startup_script_file):
            raise machineimage.exceptions.InvalidSpec(f"{self.startup_script_file}: 'startup_script_file' does not exist.")

    def _prepare_node_affinity(self, raw):
        self.node_affinity = validate_node_affinity(raw.get("node_affinity"))

    def _prepare_scopes(self, raw):
        self.scopes = machineimage.util.to_str_list(raw.get("scopes"), "scopes")

        if len(self.scopes) == 0:
            self.scopes = list(machineimage.default.SCOPES)

    def _prepare_shielded_vm(self):
        if self.enable_integrity_monitoring \
                and not self.enable_vtpm:
            raise machineimage.exceptions.InvalidSpec("'enable_vtpm' must be true to use 'enable_integrity_monitoring'.")

    def _prepare_on_host_maintenance(self, raw):
        on_host_maintenance = machineimage.util.to_str(raw.get("on_host_maintenance"), "on_host_maintenance")

        if on_host_maintenance == "MIGRATE" \
                and self.preemptible:
            raise machineimage.exceptions.InvalidSpec("'on_host_maintenance' must be TERMINATE when using preemptible instances.")

        if self.preemptible:
            on_host_maintenance = "TERMINATE"

        elif on_host_maintenance == "":
            on_host_maintenance = machineimage.default.ON_HOST_MAINTENANCE

        if on_host_maintenance not in machineimage.default.ON_HOST_MAINTENANCE_VALUES:
            raise machineimage.exceptions.InvalidSpec(f"{on_host_maintenance}: 'on_host_maintenance' must be one of MIGRATE or TERMINATE.")

        self.on_host_maintenance = on_host_maintenance

    def _prepare_accelerator(self, raw):
        accelerator_count = raw.get("accelerator_count")

        if accelerator_count is None:
            return

        self.accelerator_count = machineimage.util.to_int(accelerator_count, "accelerator_count")

        if self.accelerator_count <= 0:
            return

        if self.accelerator_type == "":
            raise machineimage.exceptions.InvalidSpec("'accelerator_type' must be set when 'accelerator_count' is more than 0.")

        # on_host_maintenance is already normalized, or it failed on its own.
        if self.on_host_maintenance in ("", "TERMINATE"):
            return

        raise machineimage.exceptions.InvalidSpec("'on_host_maintenance' must be set to TERMINATE when 'accelerator_count' is more than 0.")

    def _prepare_service_account(self):
        if self.disable_default_service_account \
                and self.service_account_email != "":
            raise machineimage.exceptions.InvalidSpec("'service_account_email' cannot be specified when 'disable_default_service_account' is true.")

    def _prepare_disk_encryption_key(self, raw):
        self.disk_encryption_key = machineimage.block_device.validate_disk_encryption_key(raw.get("disk_encryption_key"), "disk_encryption_key")

    def _prepare_timeouts(self, raw, errs):
        state_timeout = machineimage.util.get_default(raw.get("state_timeout"), machineimage.default.STATE_TIMEOUT)
        wait_to_add_ssh_keys = machineimage.util.get_default(raw.get("wait_to_add_ssh_keys"), machineimage.default.WAIT_TO_ADD_SSH_KEYS)

        self.state_timeout = collect(errs, machineimage.util.parse_duration, state_timeout, "state_timeout") or 0.0
        self.wait_to_add_ssh_keys = collect(errs, machineimage.util.parse_duration, wait_to_add_ssh_keys, "wait_to_add_ssh_keys") or 0.0

    def _prepare_iap(self, raw):
        self.iap_hashbang = machineimage.iap.get_hashbang(self.iap_hashbang)
        self.iap_ext = machineimage.iap.get_ext(self.iap_ext)

        iap_localhost_port = raw.get("iap_localhost_port")

        if iap_localhost_port is None:
            self.iap_localhost_port = machineimage.default.IAP["localhost_port"]

        else:
            self.iap_localhost_port = machineimage.util.to_int(iap_localhost_port, "iap_localhost_port")

        iap_tunnel_launch_wait = raw.get("iap_tunnel_launch_wait")

        if iap_tunnel_launch_wait is None:
            self.iap_tunnel_launch_wait = machineimage.default.IAP["tunnel_launch_wait"]

        else:
            self.iap_tunnel_launch_wait = machineimage.util.to_int(iap_tunnel_launch_wait, "iap_tunnel_launch_wait")

        if self.use_iap:
            machineimage.iap.apply_iap_tunnel(self.comm, self.iap_localhost_port)

def get_region(zone):
    match = ZONE_REGEX.match(zone)

    if match is None:
        return zone

    return match.group(1)

def validate_node_affinity(document):
    if document is None:
        return []

    if isinstance(document, dict):
        document = [document]

    if not isinstance(document, list):
        raise machineimage.exceptions.InvalidSpec("'node_affinity' is invalid.")

    keys = (
        "key",
        "operator",
        "values"
    )

    node_affinity = []

    for index, entry in enumerate(document):
        if not isinstance(entry, dict):
            raise machineimage.exceptions.InvalidSpec(f"'node_affinity.{index}' is invalid.")

        for key in entry:
            if key not in keys:
                raise machineimage.exceptions.InvalidSpec(f"node_affinity.{index}.{key}: this key is invalid.")

        key = machineimage.util.to_str(entry.get("key"), f"node_affinity.{index}.key")

        if key == "":
            raise machineimage.exceptions.InvalidSpec(f"'node_affinity.{index}.key' is required but hasn't been specified.")

        operator = machineimage.util.to_str(entry.get("operator"), f"node_affinity.{index}.operator")

        if operator not in machineimage.default.NODE_AFFINITY_OPERATORS:
            raise machineimage.exceptions.InvalidSpec(f"{operator}: 'node_affinity.{index}.operator' must be one of IN or NOT_IN.")

        values = machineimage.util.to_str_list(entry.get("values"), f"node_affinity.{index}.values")

        node_affinity.append({
            "key" : key,
            "operator" : operator,
            "values" : values
        })

    return node_affinity

def load(file):
    """
    Read a build file. A missing or empty document is returned as an empty
    mapping so that `prepare()` reports the missing keys.
    """

    document = pyaml_env.parse_config(file, default_value="")

    if document is None:
        return {}

    return document
