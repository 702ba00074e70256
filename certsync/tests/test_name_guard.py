import pytest

from certsync.core.exceptions import InvalidCollectionNameError
from certsync.core.name_guard import (
    find_collisions,
    normalize_collection_name,
    validate_collection_name,
)


@pytest.mark.parametrize("name", ["myhub", "my-hub", "my_hub_2", "A1", "-", "_"])
def test_validate_accepts_safe_names(name):
    assert validate_collection_name(name) is True


@pytest.mark.parametrize(
    "name",
    ["", "my hub!", "../etc", "hub.example", "hub/1", "hüb", "hub\n", "hub\x00", None, 42],
)
def test_validate_rejects_unsafe_names(name):
    assert validate_collection_name(name) is False


def test_normalize_keeps_valid_name_unchanged():
    assert normalize_collection_name("myhub") == "myhub"


def test_normalize_rejects_instead_of_substituting():
    with pytest.raises(InvalidCollectionNameError, match="my hub!"):
        normalize_collection_name("my hub!")


def test_find_collisions_groups_case_variants():
    collisions = find_collisions(["MyHub", "myhub", "other"])

    assert collisions == {"myhub": ["MyHub", "myhub"]}


def test_find_collisions_ignores_invalid_names():
    assert find_collisions(["my hub", "MY HUB", "ok"]) == {}
