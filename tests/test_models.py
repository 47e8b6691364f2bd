import pytest

from vmpreflight.preflight import CheckDescriptor, CheckRole, Labels, NetworkMode, Platform


def noop():
    pass


def test_verify_only_rejects_fix():
    with pytest.raises(ValueError):
        CheckDescriptor(key="check-a", role=CheckRole.VERIFY_ONLY, check=noop, fix=noop)


def test_fixable_requires_fix():
    with pytest.raises(ValueError):
        CheckDescriptor(key="check-a", role=CheckRole.VERIFY_AND_FIX, check=noop)


def test_verifying_check_requires_key_and_check():
    with pytest.raises(ValueError):
        CheckDescriptor(key="", role=CheckRole.VERIFY_ONLY, check=noop)
    with pytest.raises(ValueError):
        CheckDescriptor(key="check-a", role=CheckRole.VERIFY_ONLY)


def test_cleanup_only_rejects_check():
    with pytest.raises(ValueError):
        CheckDescriptor(key="", role=CheckRole.CLEANUP_ONLY, cleanup=noop, check=noop)
    with pytest.raises(ValueError):
        CheckDescriptor(key="", role=CheckRole.CLEANUP_ONLY)


def test_helper_constructors():
    verify = CheckDescriptor.verify_only("check-a", "Checking a", noop, cleanup=noop)
    fixable = CheckDescriptor.fixable("check-b", "Checking b", noop, "Fixing b", noop)
    cleanup = CheckDescriptor.cleanup_only("Removing c", noop)

    assert verify.role == CheckRole.VERIFY_ONLY and not verify.can_fix
    assert fixable.can_fix
    assert cleanup.key == "" and cleanup.name == "Removing c"


def test_labels_wildcards():
    assert Labels().matches(Platform.LINUX, NetworkMode.USER)
    assert Labels(os=Platform.WINDOWS).matches(Platform.WINDOWS, NetworkMode.SYSTEM)
    assert not Labels(os=Platform.WINDOWS).matches(Platform.DARWIN, NetworkMode.SYSTEM)
    assert not Labels(network_mode=NetworkMode.USER).matches(Platform.WINDOWS, NetworkMode.SYSTEM)
    assert str(Labels(os=Platform.WINDOWS)) == "windows/*"
