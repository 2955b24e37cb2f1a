import mysql.connector

from src.weekend_courses.weekend_courses.core.enums import ErrorKind
from src.weekend_courses.weekend_courses.core.exceptions import FieldValidationError, SessionFull
from src.weekend_courses.weekend_courses.core.result import run_operation
from src.weekend_courses.weekend_courses.database.errors import translate_storage_error


def test_success_wraps_data():
    result = run_operation(lambda x: x * 2, 21)

    assert result.success
    assert result.to_dict() == {"success": True, "data": 42}


def test_domain_error_becomes_tagged_failure():
    def full():
        raise SessionFull("Saturday 09:00-11:00 is at full capacity")

    result = run_operation(full)

    assert not result.success
    assert result.kind == ErrorKind.SESSION_FULL
    assert result.to_dict() == {
        "success": False,
        "error": "Saturday 09:00-11:00 is at full capacity",
        "code": "SESSION_FULL",
    }


def test_field_errors_are_carried():
    def bad():
        raise FieldValidationError({"email": "This field is required"})

    assert run_operation(bad).to_dict()["fields"] == {"email": "This field is required"}


def test_storage_errors_get_stable_messages():
    dup = translate_storage_error(mysql.connector.Error(msg="Duplicate entry 'x' for key 'uq'", errno=1062))
    down = translate_storage_error(mysql.connector.InterfaceError(msg="Can't connect"))
    other = translate_storage_error(mysql.connector.Error(msg="weird", errno=1))

    assert dup.message == "A record with this information already exists"
    assert dup.kind == ErrorKind.STORAGE_ERROR
    assert down.message == "The database is unavailable"
    assert "Duplicate" not in other.message
