import sys

import pytest

import machineimage.environment
import machineimage.process

from machineimage.exceptions import InvalidSetting

def test_run_proc_collects_output():
    code = "import sys; print('out'); print('err', file=sys.stderr); sys.exit(3)"

    (rc, stdout, stderr) = machineimage.process.run_proc([sys.executable, "-c", code], timeout=30)

    assert rc == 3
    assert stdout == "out\n"
    assert stderr == "err\n"

def test_run_proc_terminates_on_timeout():
    code = "import time; time.sleep(30)"

    (rc, stdout, stderr) = machineimage.process.run_proc([sys.executable, "-c", code], timeout=0.5)

    assert rc != 0

def test_execution_time_from_environment(monkeypatch):
    monkeypatch.setenv("MACHINEIMAGE_EXECUTION_TIME", "7")

    assert machineimage.environment.get_execution_time() == 7

@pytest.mark.parametrize("value", ["soon", "0", "-3"])
def test_invalid_execution_time(monkeypatch, value):
    monkeypatch.setenv("MACHINEIMAGE_EXECUTION_TIME", value)

    with pytest.raises(InvalidSetting, match="MACHINEIMAGE_EXECUTION_TIME"):
        machineimage.environment.get_execution_time()
