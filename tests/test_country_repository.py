import pytest
from bson import ObjectId

from errors import InvalidIdError
from repositories import CountryRepository
from schemas import CountryCreate, CountryStateCreate, CountryStateUpdate, CountryUpdate


@pytest.fixture
def countries(db):
    return CountryRepository(db)


@pytest.fixture
def peru(countries):
    return countries.insert(CountryCreate(countryName="Peru", countryCode="PE"))


def test_new_country_has_no_states(countries, peru):
    country = countries.find_by_id(peru)
    assert country.countryName == "Peru"
    assert country.states == []
    assert country.recordStatus == "active"


def test_countries_are_sorted_by_name(countries, peru):
    countries.insert(CountryCreate(countryName="Chile", countryCode="CL"))
    countries.insert(CountryCreate(countryName="Argentina", countryCode="AR"))
    assert [c.countryName for c in countries.find_all()] == ["Argentina", "Chile", "Peru"]


def test_update_country_only_touches_sent_fields(countries, peru):
    updated = countries.update(peru, CountryUpdate(countryCode="PER"))
    assert updated.countryCode == "PER"
    assert updated.countryName == "Peru"


def test_add_state(countries, peru):
    country = countries.insert_state(peru, CountryStateCreate(stateName="Cusco"))
    assert len(country.states) == 1
    state = country.states[0]
    assert state.stateName == "Cusco"
    assert state.recordStatus == "active"
    assert ObjectId.is_valid(state.id)


def test_add_state_to_missing_country(countries):
    assert countries.insert_state(str(ObjectId()), CountryStateCreate(stateName="Cusco")) is None


def test_update_state_keeps_id_and_position(countries, peru):
    countries.insert_state(peru, CountryStateCreate(stateName="Cusco"))
    country = countries.insert_state(peru, CountryStateCreate(stateName="Lima"))
    lima_id = country.states[1].id

    updated = countries.update_state(peru, lima_id, CountryStateUpdate(stateName="Lima Metropolitana"))

    assert [s.stateName for s in updated.states] == ["Cusco", "Lima Metropolitana"]
    assert updated.states[1].id == lima_id


def test_update_middle_state_leaves_neighbours(countries, peru):
    for name in ("Cusco", "Lima", "Puno"):
        country = countries.insert_state(peru, CountryStateCreate(stateName=name))
    before = country.states

    updated = countries.update_state(peru, before[1].id, CountryStateUpdate(recordStatus="inactive"))

    assert [s.stateName for s in updated.states] == ["Cusco", "Lima", "Puno"]
    assert [s.recordStatus for s in updated.states] == ["active", "inactive", "active"]
    assert [s.id for s in updated.states] == [s.id for s in before]
    assert updated.updatedAt >= updated.createdAt


def test_update_state_of_missing_country(countries, peru):
    state_id = countries.insert_state(peru, CountryStateCreate(stateName="Cusco")).states[0].id
    assert countries.update_state(str(ObjectId()), state_id, CountryStateUpdate(stateName="Puno")) is None


def test_update_state_partial(countries, peru):
    state_id = countries.insert_state(peru, CountryStateCreate(stateName="Cusco")).states[0].id

    updated = countries.update_state(peru, state_id, CountryStateUpdate(recordStatus="inactive"))

    assert updated.states[0].stateName == "Cusco"
    assert updated.states[0].recordStatus == "inactive"


def test_update_missing_state(countries, peru):
    countries.insert_state(peru, CountryStateCreate(stateName="Cusco"))
    result = countries.update_state(peru, str(ObjectId()), CountryStateUpdate(stateName="Puno"))
    assert result is None
    assert countries.find_by_id(peru).states[0].stateName == "Cusco"


def test_delete_state(countries, peru):
    countries.insert_state(peru, CountryStateCreate(stateName="Cusco"))
    country = countries.insert_state(peru, CountryStateCreate(stateName="Lima"))
    cusco_id = country.states[0].id

    updated = countries.delete_state(peru, cusco_id)

    assert [s.stateName for s in updated.states] == ["Lima"]
    assert countries.delete_state(peru, cusco_id) is None


def test_delete_country(countries, peru):
    assert countries.delete(peru) is True
    assert countries.find_by_id(peru) is None
    assert countries.delete(peru) is False


def test_invalid_state_id(countries, peru):
    with pytest.raises(InvalidIdError):
        countries.update_state(peru, "xyz", CountryStateUpdate(stateName="Puno"))
