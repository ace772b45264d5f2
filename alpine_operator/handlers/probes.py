import kopf
from alpine_operator.utils.helpers import now


# Liveness probe
@kopf.on.probe(id="now")
def get_current_timestamp(**kwargs):
    return now()


@kopf.on.probe(id="version")
def get_operator_version(**kwargs):
    from alpine_operator import __version__

    return __version__
