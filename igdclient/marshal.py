from .errors import ValidationError


RANGES = {
    "ui2": (0, 65535),
    "ui4": (0, 4294967295),
}


def marshal_boolean(value):
    return "1" if value else "0"


def marshal_unsigned(datatype, value):
    """
    Render an unsigned integer as a base-10 string, checking that it fits
    the range of the UPnP `datatype` ('ui2' or 'ui4').
    """
    v_min, v_max = RANGES[datatype]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            "%r datatype must be an integer, got %r" % (datatype, value)
        )
    if not v_min <= value <= v_max:
        raise ValidationError(
            "%r datatype must be a number in the range %s to %s, got %s"
            % (datatype, v_min, v_max, value)
        )
    return str(value)


def marshal_ui2(value):
    return marshal_unsigned("ui2", value)


def marshal_ui4(value):
    return marshal_unsigned("ui4", value)
