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
import os

import dotenv

import machineimage.default
import machineimage.exceptions

logger = logging.getLogger(__name__)

def init(env_file):
    if not os.path.isfile(env_file):
        logger.debug("(env_file:%s) environment file not found, ignoring.", env_file)
        return

    dotenv.load_dotenv(env_file)

def get_execution_time():
    execution_time = os.getenv("MACHINEIMAGE_EXECUTION_TIME")

    if execution_time is None:
        return machineimage.default.EXECUTION_TIME

    try:
        execution_time = int(execution_time)

    except ValueError:
        raise machineimage.exceptions.InvalidSetting(f"{execution_time}: invalid value for 'MACHINEIMAGE_EXECUTION_TIME', it must be a number of seconds.")

    if execution_time <= 0:
        raise machineimage.exceptions.InvalidSetting(f"{execution_time}: invalid value for 'MACHINEIMAGE_EXECUTION_TIME', it must be greater than 0.")

    return execution_time

def get_gcloud():
    return os.getenv("MACHINEIMAGE_GCLOUD", machineimage.default.GCLOUD)

def get_log_config():
    return os.getenv("MACHINEIMAGE_LOG_CONFIG")
