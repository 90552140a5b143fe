class DecodeError(Exception):
    """Exception raised when bytes cannot be decoded against a schema

    """
    pass


class TruncatedDataError(DecodeError):
    """Exception raised when input ends before the schema is satisfied

    """
    def __init__(self, message, offset=None, wanted=None):
        super(TruncatedDataError, self).__init__(message)
        self.offset = offset
        self.wanted = wanted


class SchemaError(DecodeError):
    """Exception raised when a schema is structurally unusable, independent of the data fed to it

    """
    pass


class UnknownTypeError(SchemaError):
    """Exception raised when a type reference cannot be resolved in the schema

    """
    def __init__(self, type_name):
        super(UnknownTypeError, self).__init__('unknown type "{}"'.format(type_name))
        self.type_name = type_name


class EncodeError(Exception):
    """Exception raised when a value does not fit the schema it is encoded against

    """
    pass


class UnpackError(Exception):
    """Exception raised when the outer transaction envelope cannot be unpacked

    This is the only error that aborts a report.
    """
    pass
