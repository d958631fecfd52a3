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

import os

import machineimage.default
import machineimage.exceptions
import machineimage.util

from machineimage.util import collect

KEYS = (
    "communicator",
    "pause_before_connecting",
    "ssh_host",
    "ssh_port",
    "ssh_username",
    "ssh_password",
    "ssh_private_key_file",
    "ssh_timeout",
    "ssh_handshake_attempts",
    "ssh_agent_auth",
    "ssh_clear_authorized_keys",
    "ssh_pty",
    "ssh_keep_alive_interval",
    "ssh_bastion_host",
    "ssh_bastion_port",
    "ssh_bastion_username",
    "ssh_bastion_password",
    "ssh_bastion_private_key_file",
    "temporary_key_pair_type",
    "temporary_key_pair_bits",
    "winrm_host",
    "winrm_port",
    "winrm_username",
    "winrm_password",
    "winrm_timeout",
    "winrm_use_ssl",
    "winrm_insecure"
)

class Config:
    """
    Connection settings used to reach the instance while it is being built.
    Only the fields of the selected communicator type are meaningful.
    """

    def __init__(self):
        self.type = machineimage.default.COMMUNICATOR["type"]
        self.pause_before_connecting = 0.0

        self.ssh_host = ""
        self.ssh_port = 0
        self.ssh_username = ""
        self.ssh_password = ""
        self.ssh_private_key_file = ""
        self.ssh_timeout = 0.0
        self.ssh_handshake_attempts = 0
        self.ssh_agent_auth = False
        self.ssh_clear_authorized_keys = False
        self.ssh_pty = False
        self.ssh_keep_alive_interval = 0.0
        self.ssh_bastion_host = ""
        self.ssh_bastion_port = 0
        self.ssh_bastion_username = ""
        self.ssh_bastion_password = ""
        self.ssh_bastion_private_key_file = ""
        self.temporary_key_pair_type = ""
        self.temporary_key_pair_bits = 0

        self.winrm_host = ""
        self.winrm_port = 0
        self.winrm_username = ""
        self.winrm_password = ""
        self.winrm_timeout = 0.0
        self.winrm_use_ssl = False
        self.winrm_insecure = False

    @property
    def host(self):
        if self.type == "ssh":
            return self.ssh_host

        elif self.type == "winrm":
            return self.winrm_host

    @property
    def port(self):
        if self.type == "ssh":
            return self.ssh_port

        elif self.type == "winrm":
            return self.winrm_port

    def to_dict(self):
        config = {
            "type" : self.type,
            "pause_before_connecting" : self.pause_before_connecting
        }

        if self.type == "ssh":
            config["host"] = self.ssh_host
            config["port"] = self.ssh_port
            config["username"] = self.ssh_username
            config["private_key_file"] = self.ssh_private_key_file
            config["timeout"] = self.ssh_timeout
            config["handshake_attempts"] = self.ssh_handshake_attempts
            config["agent_auth"] = self.ssh_agent_auth
            config["clear_authorized_keys"] = self.ssh_clear_authorized_keys
            config["bastion_host"] = self.ssh_bastion_host
            config["temporary_key_pair_type"] = self.temporary_key_pair_type

        elif self.type == "winrm":
            config["host"] = self.winrm_host
            config["port"] = self.winrm_port
            config["username"] = self.winrm_username
            config["timeout"] = self.winrm_timeout
            config["use_ssl"] = self.winrm_use_ssl
            config["insecure"] = self.winrm_insecure

        return config

    def prepare(self, raw):
        errs = machineimage.exceptions.MultiError()

        try:
            self._prepare_type(raw)

        except machineimage.exceptions.InvalidSpec as err:
            errs.append(err)

            return errs

        collect(errs, self._prepare_pause_before_connecting, raw)

        if self.type == "ssh":
            self._prepare_ssh(raw, errs)

        elif self.type == "winrm":
            self._prepare_winrm(raw, errs)

        return errs

    def _prepare_type(self, raw):
        _type = machineimage.util.get_default(raw.get("communicator"), "")

        if _type == "":
            _type = machineimage.default.COMMUNICATOR["type"]

        if _type not in machineimage.default.COMMUNICATOR["types"]:
            raise machineimage.exceptions.InvalidSpec(f"{_type}: invalid value for 'communicator'")

        self.type = _type

    def _prepare_pause_before_connecting(self, raw):
        value = machineimage.util.get_default(raw.get("pause_before_connecting"), machineimage.default.COMMUNICATOR["pause_before_connecting"])

        self.pause_before_connecting = machineimage.util.parse_duration(value, "pause_before_connecting")

    def _prepare_ssh(self, raw, errs):
        defaults = machineimage.default.COMMUNICATOR["ssh"]

        self.ssh_host = collect(errs, machineimage.util.to_str, raw.get("ssh_host"), "ssh_host") or ""
        self.ssh_password = collect(errs, machineimage.util.to_str, raw.get("ssh_password"), "ssh_password") or ""

        port = raw.get("ssh_port")

        if port is None:
            self.ssh_port = defaults["port"]

        else:
            self.ssh_port = collect(errs, machineimage.util.to_int, port, "ssh_port") or 0

        attempts = raw.get("ssh_handshake_attempts")

        if attempts is None:
            self.ssh_handshake_attempts = defaults["handshake_attempts"]

        else:
            self.ssh_handshake_attempts = collect(errs, machineimage.util.to_int, attempts, "ssh_handshake_attempts") or 0

        timeout = machineimage.util.get_default(raw.get("ssh_timeout"), defaults["timeout"])

        self.ssh_timeout = collect(errs, machineimage.util.parse_duration, timeout, "ssh_timeout") or 0.0

        self.ssh_username = collect(errs, machineimage.util.to_str, raw.get("ssh_username"), "ssh_username") or ""

        if self.ssh_username == "":
            errs.append(machineimage.exceptions.InvalidSpec("An 'ssh_username' must be specified."))

        self.ssh_private_key_file = collect(errs, machineimage.util.to_str, raw.get("ssh_private_key_file"), "ssh_private_key_file") or ""

        if self.ssh_private_key_file != "" \
                and not os.path.isfile(self.ssh_private_key_file):
            errs.append(machineimage.exceptions.InvalidSpec(f"{self.ssh_private_key_file}: 'ssh_private_key_file' is invalid: file does not exist."))

        self.ssh_agent_auth = collect(errs, machineimage.util.to_bool, raw.get("ssh_agent_auth"), "ssh_agent_auth") or False
        self.ssh_clear_authorized_keys = collect(errs, machineimage.util.to_bool, raw.get("ssh_clear_authorized_keys"), "ssh_clear_authorized_keys") or False
        self.ssh_pty = collect(errs, machineimage.util.to_bool, raw.get("ssh_pty"), "ssh_pty") or False

        keep_alive_interval = machineimage.util.get_default(raw.get("ssh_keep_alive_interval"), defaults["keep_alive_interval"])

        self.ssh_keep_alive_interval = collect(errs, machineimage.util.parse_duration, keep_alive_interval, "ssh_keep_alive_interval") or 0.0

        collect(errs, self._prepare_ssh_bastion, raw)
        collect(errs, self._prepare_temporary_key_pair, raw)

    def _prepare_ssh_bastion(self, raw):
        defaults = machineimage.default.COMMUNICATOR["ssh"]

        self.ssh_bastion_host = machineimage.util.to_str(raw.get("ssh_bastion_host"), "ssh_bastion_host")
        self.ssh_bastion_username = machineimage.util.to_str(raw.get("ssh_bastion_username"), "ssh_bastion_username")
        self.ssh_bastion_password = machineimage.util.to_str(raw.get("ssh_bastion_password"), "ssh_bastion_password")
        self.ssh_bastion_private_key_file = machineimage.util.to_str(raw.get("ssh_bastion_private_key_file"), "ssh_bastion_private_key_file")

        port = raw.get("ssh_bastion_port")

        if port is None:
            self.ssh_bastion_port = defaults["port"]

        else:
            self.ssh_bastion_port = machineimage.util.to_int(port, "ssh_bastion_port")

        if self.ssh_bastion_private_key_file != "" \
                and not os.path.isfile(self.ssh_bastion_private_key_file):
            raise machineimage.exceptions.InvalidSpec(f"{self.ssh_bastion_private_key_file}: 'ssh_bastion_private_key_file' is invalid: file does not exist.")

    def _prepare_temporary_key_pair(self, raw):
        key_pairs = machineimage.default.COMMUNICATOR["temporary_key_pair"]

        key_pair_type = machineimage.util.to_str(raw.get("temporary_key_pair_type"), "temporary_key_pair_type")

        if key_pair_type == "":
            key_pair_type = key_pairs["type"]

        if key_pair_type not in key_pairs["bits"]:
            raise machineimage.exceptions.InvalidSpec(f"{key_pair_type}: invalid value for 'temporary_key_pair_type'")

        self.temporary_key_pair_type = key_pair_type

        bits = raw.get("temporary_key_pair_bits")

        if bits is None:
            self.temporary_key_pair_bits = key_pairs["bits"][key_pair_type]
            return

        self.temporary_key_pair_bits = machineimage.util.to_int(bits, "temporary_key_pair_bits")

        if key_pair_type == "ecdsa" \
                and self.temporary_key_pair_bits not in key_pairs["ecdsa_bits"]:
            raise machineimage.exceptions.InvalidSpec(f"{self.temporary_key_pair_bits}: 'temporary_key_pair_bits' must be one of 256, 384 or 521 for ecdsa keys.")

    def _prepare_winrm(self, raw, errs):
        defaults = machineimage.default.COMMUNICATOR["winrm"]

        self.winrm_host = collect(errs, machineimage.util.to_str, raw.get("winrm_host"), "winrm_host") or ""
        self.winrm_password = collect(errs, machineimage.util.to_str, raw.get("winrm_password"), "winrm_password") or ""
        self.winrm_use_ssl = collect(errs, machineimage.util.to_bool, raw.get("winrm_use_ssl"), "winrm_use_ssl") or False
        self.winrm_insecure = collect(errs, machineimage.util.to_bool, raw.get("winrm_insecure"), "winrm_insecure") or False

        port = raw.get("winrm_port")

        if port is not None:
            self.winrm_port = collect(errs, machineimage.util.to_int, port, "winrm_port") or 0

        elif self.winrm_use_ssl:
            self.winrm_port = defaults["ssl_port"]

        else:
            self.winrm_port = defaults["port"]

        timeout = machineimage.util.get_default(raw.get("winrm_timeout"), defaults["timeout"])

        self.winrm_timeout = collect(errs, machineimage.util.parse_duration, timeout, "winrm_timeout") or 0.0

        self.winrm_username = collect(errs, machineimage.util.to_str, raw.get("winrm_username"), "winrm_username") or ""

        if self.winrm_username == "":
            errs.append(machineimage.exceptions.InvalidSpec("A 'winrm_username' must be specified."))
