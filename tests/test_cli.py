import io

import pytest

from rwsig.cli import build_parser, main
from rwsig.keyfile import save_keypair


@pytest.fixture
def key_files(tmp_path, keypair):
    public_path = tmp_path / "public_key.hex"
    private_path = tmp_path / "private_key.hex"
    save_keypair(keypair, public_path, private_path)
    return public_path, private_path


def run(argv):
    return main([str(arg) for arg in argv])


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_generate(tmp_path, capsys):
    public_path = tmp_path / "pub.hex"
    private_path = tmp_path / "priv.hex"
    assert run(["generate", "--bits", 1024,
                "--public-key", public_path, "--private-key", private_path]) == 0
    assert public_path.exists() and private_path.exists()
    assert "Key pair generated successfully!" in capsys.readouterr().out


def test_generate_rejects_small_keys(tmp_path, capsys):
    code = run(["generate", "--bits", 512,
                "--public-key", tmp_path / "pub.hex", "--private-key", tmp_path / "priv.hex"])
    assert code == 1
    assert "Error: " in capsys.readouterr().err


def test_sign_and_verify(tmp_path, key_files, capsys):
    public_path, private_path = key_files
    signature_path = tmp_path / "signature.hex"

    assert run(["sign", "-k", private_path, "-m", "hello", "-o", signature_path]) == 0
    assert run(["verify", "-k", public_path, "-s", signature_path, "-m", "hello"]) == 0
    assert "Signature is valid" in capsys.readouterr().out

    assert run(["verify", "-k", public_path, "-s", signature_path, "-m", "goodbye"]) == 1
    assert "Signature is invalid" in capsys.readouterr().out


def test_sign_to_stdout_from_stdin(key_files, keypair, capsys, monkeypatch):
    _, private_path = key_files
    monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(b"from stdin")))
    assert run(["sign", "-k", private_path]) == 0
    signature = bytes.fromhex(capsys.readouterr().out.strip())
    assert keypair.public.verify(b"from stdin", signature)


def test_hash_option_must_match(tmp_path, key_files, capsys):
    public_path, private_path = key_files
    signature_path = tmp_path / "signature.hex"
    assert run(["--hash", "sha512", "sign", "-k", private_path, "-m", "hi", "-o", signature_path]) == 0
    assert run(["--hash", "sha512", "verify", "-k", public_path, "-s", signature_path, "-m", "hi"]) == 0
    assert run(["--hash", "sha256", "verify", "-k", public_path, "-s", signature_path, "-m", "hi"]) == 1


def test_malformed_signature_file(tmp_path, key_files, capsys):
    public_path, _ = key_files
    signature_path = tmp_path / "signature.hex"
    signature_path.write_text("fc00")
    assert run(["verify", "-k", public_path, "-s", signature_path, "-m", "hi"]) == 1
    assert "Error: " in capsys.readouterr().err


def test_blind_flow(tmp_path, key_files, capsys):
    public_path, private_path = key_files
    blinded = tmp_path / "blinded_message.hex"
    factor = tmp_path / "blinding_factor.hex"
    blinded_signature = tmp_path / "blinded_signature.hex"
    signature = tmp_path / "signature.hex"

    assert run(["blind", "-k", public_path, "-m", "ballot", "-b", blinded, "-r", factor]) == 0
    assert run(["blind-sign", "-k", private_path, "-m", blinded, "-o", blinded_signature]) == 0
    assert run(["unblind", "-k", public_path, "-s", blinded_signature,
                "-r", factor, "-o", signature]) == 0
    assert run(["verify", "-k", public_path, "-s", signature, "-m", "ballot"]) == 0
    assert "Signature is valid" in capsys.readouterr().out


def test_missing_key_file(tmp_path, capsys):
    assert run(["sign", "-k", tmp_path / "missing.hex", "-m", "hi"]) == 1
    assert "Error: " in capsys.readouterr().err


@pytest.mark.parametrize("variable, value", [
    ("RW_HASH", "md5"),
    ("RW_LOG_LEVEL", "loud"),
    ("RW_KEY_BITS", "many"),
])
def test_invalid_environment_is_reported(tmp_path, rw_env, capsys, variable, value):
    rw_env.setenv(variable, value)
    code = run(["generate", "--public-key", tmp_path / "pub.hex",
                "--private-key", tmp_path / "priv.hex"])
    assert code == 1
    err = capsys.readouterr().err
    assert err.startswith("Error: ")
    assert "Traceback" not in err
    assert not (tmp_path / "pub.hex").exists()
