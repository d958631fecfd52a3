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
import sys

import click

import machineimage.commands
import machineimage.driver
import machineimage.exceptions
import machineimage.multistep
import machineimage.ui
import machineimage.util

from machineimage.multistep import StateBag, StepAction
from machineimage.step_check_existing_machine_image import StepCheckExistingMachineImage
from machineimage.sysexits import EX_CONFIG, EX_SOFTWARE

logger = logging.getLogger(__name__)

@machineimage.commands.cli.command(add_help_option=False)
@click.option("-f", "--file", required=True)
@click.option("--force", is_flag=True, default=False, help="Do not halt when the machine image already exists.")
@click.option("--timeout", type=int, default=None, help="Seconds to wait for gcloud.")
def check(file, force, timeout):
    config = machineimage.commands.load_config(file, force=force)

    try:
        driver = machineimage.driver.GcloudDriver(timeout=timeout)

    except machineimage.exceptions.InvalidSetting as err:
        error = machineimage.util.get_error(err)
        error_type = error.get("type")
        error_message = error.get("message")

        logger.error("%s: %s", error_type, error_message)

        sys.exit(EX_CONFIG)

    state = StateBag(
        config=config,
        driver=driver,
        ui=machineimage.ui.Ui()
    )

    steps = [
        StepCheckExistingMachineImage()
    ]

    action = machineimage.multistep.run_steps(steps, state)

    if action == StepAction.HALT:
        logger.debug("(error:%s) build halted.", state.get("error"))

        sys.exit(EX_SOFTWARE)

    if config.machine_image_already_exists:
        print(f"{config.machine_image_name}: exists (forced)")

    else:
        print(f"{config.machine_image_name}: does not exist")
