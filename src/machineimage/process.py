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
import subprocess

import machineimage.environment

logger = logging.getLogger(__name__)

def run(cmd, env=None, timeout=None, cwd=None):
    settings = {
        "stdout" : subprocess.PIPE,
        "stderr" : subprocess.PIPE,
        "stdin" : subprocess.DEVNULL,
        "text" : True,
        "env" : env,
        "cwd" : cwd
    }

    if isinstance(cmd, str):
        settings["shell"] = True
    else:
        settings["shell"] = False

    if timeout is None:
        timeout = machineimage.environment.get_execution_time()

    with subprocess.Popen(cmd, **settings) as proc:
        try:
            (stdout, stderr) = proc.communicate(timeout=timeout)

        except subprocess.TimeoutExpired:
            logger.warning("(args:%s, timeout:%d) process timed out, terminating.", repr(cmd), timeout)

            proc.terminate()

            (stdout, stderr) = proc.communicate()

        for line in stdout.splitlines(keepends=True):
            yield { "line" : line }

        for line in stderr.splitlines(keepends=True):
            yield { "stderr" : line }

        yield { "rc" : proc.returncode }

def run_proc(*args, **kwargs):
    proc = run(*args, **kwargs)

    rc = 0
    stdout = []
    stderr = []

    for output in proc:
        if "line" in output:
            stdout.append(output["line"])

        elif "stderr" in output:
            stderr.append(output["stderr"])

        elif "rc" in output:
            rc = output["rc"]

    return (rc, "".join(stdout), "".join(stderr))
