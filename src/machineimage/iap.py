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

import sys

import machineimage.default
import machineimage.exceptions

def get_platform_defaults(platform=None):
    if platform is None:
        platform = sys.platform

    if platform.startswith("win"):
        return machineimage.default.IAP["windows"]

    return machineimage.default.IAP["posix"]

def get_hashbang(hashbang, platform=None):
    if hashbang:
        return hashbang

    return get_platform_defaults(platform)["hashbang"]

def get_ext(ext, platform=None):
    if ext:
        return ext

    return get_platform_defaults(platform)["ext"]

def apply_iap_tunnel(comm, port):
    """
    Point the communicator at the local end of the IAP tunnel. The tunnel
    itself is opened later by the build, so only the host and port change.
    """

    host = machineimage.default.IAP["host"]

    if comm.type == "ssh":
        comm.ssh_host = host
        comm.ssh_port = port

    elif comm.type == "winrm":
        comm.winrm_host = host
        comm.winrm_port = port

    else:
        raise machineimage.exceptions.UnsupportedCommunicator(f"{comm.type}: IAP tunnels only support the 'ssh' and 'winrm' communicators.")
