class AllocationError(Exception):
    """
    A payment could not be allocated because the request itself is wrong
    (unknown or foreign rent cycle, non-positive amount, inactive tenant).
    Safe to show to the caller.
    """


class GatewayError(Exception):
    """The payment gateway rejected a call or could not be reached."""
