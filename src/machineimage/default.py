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

ENV_FILE = ".env"
LOG_CONFIG = {
    "version" : 1,
    "disable_existing_loggers" : False,
    "formatters" : {
        "default" : {
            "format" : "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        },
        "ui" : {
            "format" : "==> %(message)s"
        }
    },
    "handlers" : {
        "default" : {
            "class" : "logging.StreamHandler",
            "formatter" : "default",
            "stream" : "ext://sys.stderr"
        },
        "ui" : {
            "class" : "logging.StreamHandler",
            "formatter" : "ui",
            "stream" : "ext://sys.stdout"
        }
    },
    "loggers" : {
        "machineimage.ui" : {
            "handlers" : ["ui"],
            "level" : "INFO",
            "propagate" : False
        }
    },
    "root" : {
        "handlers" : ["default"],
        "level" : "WARNING"
    }
}
EXECUTION_TIME = 60
GCLOUD = "gcloud"
MACHINE_IMAGE_NAME = "packer-{{timestamp}}"
INSTANCE_NAME = "packer-{{uuid}}"
DISK_ATTACHMENT_NAME = "packer-{{uuid}}"
MACHINE_TYPE = "e2-standard-2"
DISK_SIZE = 20
DISK_TYPE = "pd-standard"
NETWORK = "default"
STATE_TIMEOUT = "5m"
WAIT_TO_ADD_SSH_KEYS = "0s"
ON_HOST_MAINTENANCE = "MIGRATE"
ON_HOST_MAINTENANCE_VALUES = ("MIGRATE", "TERMINATE")
SCOPES = [
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/compute",
    "https://www.googleapis.com/auth/devstorage.full_control"
]
DISK_ENCRYPTION_KEY_KEYS = (
    "kmsKeyName",
    "RawKey"
)
NODE_AFFINITY_OPERATORS = ("IN", "NOT_IN")
IAP = {
    "localhost_port" : 0,
    "tunnel_launch_wait" : 30,
    "host" : "localhost",
    "windows" : {
        "hashbang" : "",
        "ext" : ".cmd"
    },
    "posix" : {
        "hashbang" : "/bin/sh",
        "ext" : ""
    }
}
COMMUNICATOR = {
    "type" : "ssh",
    "types" : ("ssh", "winrm", "none"),
    "pause_before_connecting" : "0s",
    "ssh" : {
        "port" : 22,
        "timeout" : "5m",
        "handshake_attempts" : 10,
        "keep_alive_interval" : "5s"
    },
    "winrm" : {
        "port" : 5985,
        "ssl_port" : 5986,
        "timeout" : "30m"
    },
    "temporary_key_pair" : {
        "type" : "rsa",
        "bits" : {
            "rsa" : 4096,
            "dsa" : 1024,
            "ecdsa" : 521,
            "ed25519" : 0
        },
        "ecdsa_bits" : (256, 384, 521)
    }
}
DISK_ATTACHMENT = {
    "attachment_mode" : "READ_WRITE",
    "attachment_modes" : ("READ_WRITE", "READ_ONLY"),
    "interface_type" : "SCSI",
    "interface_types" : ("SCSI", "NVME"),
    "scratch_size" : 375,
    "replica_zones" : 2,
    "volume_types" : (
        "scratch",
        "pd-standard",
        "pd-balanced",
        "pd-ssd",
        "pd-extreme",
        "hyperdisk-balanced",
        "hyperdisk-extreme",
        "hyperdisk-throughput"
    ),
    "iops_volume_types" : (
        "pd-extreme",
        "hyperdisk-balanced",
        "hyperdisk-extreme",
        "hyperdisk-throughput"
    ),
    "throughput_volume_types" : (
        "hyperdisk-balanced",
        "hyperdisk-extreme",
        "hyperdisk-throughput"
    )
}
PACKER_KEYS = (
    "packer_build_name",
    "packer_builder_type",
    "packer_core_version",
    "packer_debug",
    "packer_force",
    "packer_on_error",
    "packer_template_path",
    "packer_user_variables",
    "packer_sensitive_variables"
)
