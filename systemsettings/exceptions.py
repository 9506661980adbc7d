from rest_framework import status
from rest_framework.exceptions import APIException


class ConfigParseError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "A system setting holds a value that cannot be parsed."
    default_code = "config_parse_error"

    def __init__(self, key, value, expected):
        self.key = key
        self.value = value
        super().__init__(
            f"System setting '{key}' has invalid value {value!r}; expected {expected}."
        )
