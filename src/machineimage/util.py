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

import re
import time
import uuid

import humanfriendly

import machineimage.exceptions

TRUE_VALUES = ("1", "t", "T", "TRUE", "true", "True")
FALSE_VALUES = ("", "0", "f", "F", "FALSE", "false", "False")

DURATION_COMPONENT = r"\d+(?:\.\d+)?(?:ns|us|µs|ms|s|m|h)"
DURATION_REGEX = re.compile(r"(?:%s)+" % DURATION_COMPONENT)
DURATION_COMPONENT_REGEX = re.compile(r"(\d+(?:\.\d+)?)(ns|us|µs|ms|s|m|h)")
TEMPLATE_REGEX = re.compile(r"{{\s*([a-zA-Z_]+)\s*}}")

def get_default(value, default=None):
    if value is None:
        return default

    return value

def to_bool(value, key):
    if value is None:
        return False

    if isinstance(value, bool):
        return value

    if isinstance(value, str):
        if value in TRUE_VALUES:
            return True

        elif value in FALSE_VALUES:
            return False

    raise machineimage.exceptions.InvalidSpec(f"{value}: invalid value type for '{key}'")

def to_int(value, key):
    if isinstance(value, bool):
        raise machineimage.exceptions.InvalidSpec(f"{value}: invalid value type for '{key}'")

    if isinstance(value, int):
        return value

    if isinstance(value, str):
        try:
            return int(value, 10)

        except ValueError:
            pass

    raise machineimage.exceptions.InvalidSpec(f"{value}: invalid value type for '{key}'")

def to_str(value, key):
    if value is None:
        return ""

    if not isinstance(value, str):
        raise machineimage.exceptions.InvalidSpec(f"{value}: invalid value type for '{key}'")

    return value

def to_str_list(value, key):
    if value is None:
        return []

    if not isinstance(value, list):
        raise machineimage.exceptions.InvalidSpec(f"'{key}' is invalid.")

    for index, entry in enumerate(value):
        if not isinstance(entry, str):
            raise machineimage.exceptions.InvalidSpec(f"{entry}: invalid value type for '{key}.{index}'")

    return list(value)

def to_str_dict(value, key):
    if value is None:
        return {}

    if not isinstance(value, dict):
        raise machineimage.exceptions.InvalidSpec(f"'{key}' is invalid.")

    for name, entry in value.items():
        if not isinstance(name, str) \
                or not isinstance(entry, str):
            raise machineimage.exceptions.InvalidSpec(f"{entry}: invalid value type for '{key}.{name}'")

    return dict(value)

def parse_duration(value, key):
    """
    Parse a duration string such as "5s", "1m30s" or "300ms" and return
    the number of seconds it represents. The bare string "0" is accepted.
    """

    if not isinstance(value, str):
        raise machineimage.exceptions.InvalidDuration(f"{value}: invalid value type for '{key}'")

    if value == "0":
        return 0.0

    if DURATION_REGEX.fullmatch(value) is None:
        raise machineimage.exceptions.InvalidDuration(f"{value}: invalid duration for '{key}'")

    seconds = 0.0

    for (number, unit) in DURATION_COMPONENT_REGEX.findall(value):
        if unit == "µs":
            unit = "us"

        try:
            seconds += humanfriendly.parse_timespan(f"{number}{unit}")

        except humanfriendly.InvalidTimespan as err:
            raise machineimage.exceptions.InvalidDuration(f"{value}: invalid duration for '{key}': {err}")

    return seconds

def render(template, key):
    def _replace(match):
        name = match.group(1)

        if name == "timestamp":
            return "%d" % int(time.time())

        elif name == "uuid":
            return "%s" % uuid.uuid4()

        raise machineimage.exceptions.InvalidTemplate(f"{template}: unknown placeholder '{name}' in '{key}'")

    return TEMPLATE_REGEX.sub(_replace, template)

def collect(errs, validator, *args, **kwargs):
    try:
        return validator(*args, **kwargs)

    except machineimage.exceptions.InvalidSpec as err:
        errs.append(err)

def get_error(err):
    info = {
        "type" : err.__class__.__name__,
        "message" : str(err)
    }

    return info

def mask_encryption_key(encryption_key):
    masked = dict(encryption_key)

    if "RawKey" in masked:
        masked["RawKey"] = "<sensitive>"

    return masked
