import pytest

import machineimage.communicator
import machineimage.iap

from machineimage.exceptions import UnsupportedCommunicator

def _comm(comm_type, **kwargs):
    comm = machineimage.communicator.Config()
    comm.type = comm_type

    for key, value in kwargs.items():
        setattr(comm, key, value)

    return comm

def test_apply_iap_tunnel_ssh():
    comm = _comm("ssh", ssh_host="example", ssh_port=1234)

    machineimage.iap.apply_iap_tunnel(comm, 8447)

    assert comm.ssh_host == "localhost"
    assert comm.ssh_port == 8447
    assert comm.host == "localhost"
    assert comm.port == 8447

def test_apply_iap_tunnel_winrm():
    comm = _comm("winrm", winrm_host="example", winrm_port=1234)

    machineimage.iap.apply_iap_tunnel(comm, 8447)

    assert comm.winrm_host == "localhost"
    assert comm.winrm_port == 8447

def test_apply_iap_tunnel_none():
    comm = _comm("none")

    with pytest.raises(UnsupportedCommunicator):
        machineimage.iap.apply_iap_tunnel(comm, 8447)

@pytest.mark.parametrize("platform,hashbang,ext", [
    ("win32", "", ".cmd"),
    ("linux", "/bin/sh", ""),
    ("darwin", "/bin/sh", ""),
])
def test_platform_defaults(platform, hashbang, ext):
    assert machineimage.iap.get_hashbang("", platform) == hashbang
    assert machineimage.iap.get_ext("", platform) == ext

def test_explicit_values_are_kept():
    assert machineimage.iap.get_hashbang("/bin/bash", "linux") == "/bin/bash"
    assert machineimage.iap.get_ext(".ps1", "win32") == ".ps1"
