"""Report service exceptions"""


class PaymentServiceError(Exception):
    """Payment service search call failed or returned an unusable body"""

    pass
