import pytest

import machineimage.communicator
import machineimage.config

def _prepare(raw):
    comm = machineimage.communicator.Config()

    errs = comm.prepare(raw)

    return (comm, errs)

def test_invalid_type_reports_a_single_error():
    (comm, errs) = _prepare({"communicator" : "telepathy"})

    assert [str(err) for err in errs.errors] == ["telepathy: invalid value for 'communicator'"]

def test_ssh_requires_username():
    (comm, errs) = _prepare({"communicator" : "ssh"})

    assert len(errs) == 1
    assert "ssh_username" in str(errs)

def test_none_needs_nothing():
    (comm, errs) = _prepare({"communicator" : "none"})

    assert len(errs) == 0
    assert comm.host is None

def test_ssh_defaults():
    (comm, errs) = _prepare({"ssh_username" : "packer"})

    assert len(errs) == 0
    assert comm.ssh_port == 22
    assert comm.ssh_keep_alive_interval == 5
    assert comm.ssh_bastion_port == 22
    assert comm.temporary_key_pair_type == "rsa"
    assert comm.temporary_key_pair_bits == 4096

def test_common_ssh_keys_are_accepted(raw_config):
    raw_config.update({
        "ssh_agent_auth" : True,
        "ssh_clear_authorized_keys" : True,
        "ssh_pty" : "true",
        "ssh_keep_alive_interval" : "10s",
        "ssh_bastion_host" : "bastion.example.com",
        "ssh_bastion_port" : 2222,
        "ssh_bastion_username" : "jump",
        "temporary_key_pair_type" : "ed25519"
    })

    config = machineimage.config.Config()

    (warnings, errs) = config.prepare(raw_config)

    assert errs is None
    assert config.comm.ssh_agent_auth is True
    assert config.comm.ssh_clear_authorized_keys is True
    assert config.comm.ssh_pty is True
    assert config.comm.ssh_keep_alive_interval == 10
    assert config.comm.ssh_bastion_host == "bastion.example.com"
    assert config.comm.ssh_bastion_port == 2222
    assert config.comm.temporary_key_pair_type == "ed25519"

@pytest.mark.parametrize("values", [
    {"temporary_key_pair_type" : "rot13"},
    {"temporary_key_pair_type" : "ecdsa", "temporary_key_pair_bits" : 1024},
    {"ssh_bastion_port" : "twenty-two"},
    {"ssh_bastion_private_key_file" : "/tmp/i/should/not/exist"},
    {"ssh_keep_alive_interval" : "often"},
    {"ssh_agent_auth" : "NOT A BOOL"},
])
def test_invalid_ssh_settings(values):
    raw = {"ssh_username" : "packer"}
    raw.update(values)

    (comm, errs) = _prepare(raw)

    assert len(errs) == 1

def test_ecdsa_bits():
    (comm, errs) = _prepare({"ssh_username" : "packer", "temporary_key_pair_type" : "ecdsa", "temporary_key_pair_bits" : 384})

    assert len(errs) == 0
    assert comm.temporary_key_pair_bits == 384
