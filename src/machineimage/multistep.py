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

import enum
import logging

logger = logging.getLogger(__name__)

class StepAction(enum.Enum):
    CONTINUE = "continue"
    HALT = "halt"

class StateBag:
    def __init__(self, **kwargs):
        self._state = dict(kwargs)

    def get(self, key, default=None):
        return self._state.get(key, default)

    def put(self, key, value):
        self._state[key] = value

    def __contains__(self, key):
        return key in self._state

class Step:
    def run(self, state):
        raise NotImplementedError

    def cleanup(self, state):
        pass

def run_steps(steps, state):
    """
    Run the steps in order until one of them halts, then call `cleanup()` on
    every step that ran, in reverse order.
    """

    ran = []
    action = StepAction.CONTINUE

    try:
        for step in steps:
            logger.debug("running step %s", step.__class__.__name__)

            ran.append(step)

            action = step.run(state)

            if action == StepAction.HALT:
                state.put("halted", True)
                break

    finally:
        for step in reversed(ran):
            step.cleanup(state)

    return action
