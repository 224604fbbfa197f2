"""Model fields for the WordPress schema."""

from datetime import datetime

from django.db import models

ZERO_DATE = "0000-00-00 00:00:00"
MYSQL_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class WordPressDateTimeField(models.CharField):
    """A DATETIME column exposed as WordPress' naive ``YYYY-MM-DD HH:MM:SS`` string.

    WordPress uses ``0000-00-00 00:00:00`` for "unset", which no Python
    datetime can hold. Values therefore stay strings in Python; whatever the
    driver returns (``datetime``, ``None`` for zero dates, or text) is
    normalised to that string form.
    """

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("max_length", 19)
        kwargs.setdefault("default", ZERO_DATE)
        super().__init__(*args, **kwargs)

    def db_type(self, connection):
        if connection.vendor == "mysql":
            return "datetime"
        return super().db_type(connection)

    def from_db_value(self, value, expression, connection):
        return self.to_python(value)

    def to_python(self, value):
        if value is None or value == "":
            return ZERO_DATE
        if isinstance(value, datetime):
            return value.replace(tzinfo=None).strftime(MYSQL_DATETIME_FORMAT)
        return str(value)


__all__ = ["WordPressDateTimeField", "ZERO_DATE", "MYSQL_DATETIME_FORMAT"]
