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

import logging

import machineimage.environment
import machineimage.process

logger = logging.getLogger(__name__)

class Driver:
    """
    The part of the cloud driver needed by the build steps.
    """

    def machine_image_exists(self, project_id, name):
        raise NotImplementedError

class GcloudDriver(Driver):
    """
    Asks the gcloud CLI about machine images. Any failure, including a
    missing gcloud binary, is answered as "does not exist".
    """

    def __init__(self, gcloud=None, timeout=None):
        if gcloud is None:
            gcloud = machineimage.environment.get_gcloud()

        if timeout is None:
            timeout = machineimage.environment.get_execution_time()

        self.gcloud = gcloud
        self.timeout = timeout

    def machine_image_exists(self, project_id, name):
        args = [
            self.gcloud,
            "compute",
            "machine-images",
            "describe",
            name,
            "--project", project_id,
            "--format", "value(name)"
        ]

        try:
            (rc, stdout, stderr) = machineimage.process.run_proc(args, timeout=self.timeout)

        except OSError as err:
            logger.debug("(args:%s) cannot run gcloud: %s", repr(args), err)

            return False

        if rc != 0:
            logger.debug("(rc:%d, args:%s): %s", rc, repr(args), stderr.rstrip())

            return False

        return stdout.strip() == name
