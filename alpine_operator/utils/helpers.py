import jsonpickle
from datetime import datetime, timezone


def now() -> str:
    return datetime.now(timezone.utc).isoformat()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_datestr_to_datetime(datestr):
    if isinstance(datestr, str) and len(datestr) > 0:
        if datestr[-1] == "Z":
            return datetime.fromisoformat(datestr.replace("Z", "+00:00"))
        else:
            return datetime.fromisoformat(datestr)
    else:
        raise ValueError("'{}' is not valid iso date format".format(datestr))


def sort_dict_keys(d):
    """Recursively sort dictionary keys and handle nested structures.

    Args:
        d: Data structure (dict, list, or primitive type)

    Returns:
        Sorted version of the data structure
    """
    if isinstance(d, dict):
        return {key: sort_dict_keys(value) for key, value in sorted(d.items())}
    elif isinstance(d, list):
        return [sort_dict_keys(item) for item in d]
    else:
        return d


def deep_compare_dict(data1, data2) -> bool:
    """Compare two data structures deeply, ignoring key order.

    Supports dictionaries, lists of dictionaries and nested combinations of both.
    """
    if data1 is None and data2 is None:
        return True
    if data1 is None or data2 is None:
        return False

    if not isinstance(data1, type(data2)) and not isinstance(data2, type(data1)):
        return False

    try:
        json1 = jsonpickle.dumps(sort_dict_keys(data1), unpicklable=False)
        json2 = jsonpickle.dumps(sort_dict_keys(data2), unpicklable=False)
        return json1 == json2
    except (TypeError, ValueError):
        return data1 == data2
