class StoreError(Exception):
    """Base class for any failure while talking to the counter store"""


class StoreConnectionError(StoreError):
    """Opening or closing the store connection failed"""


class StoreReadError(StoreError):
    """Reading the counter failed"""


class StoreWriteError(StoreError):
    """Writing the counter failed"""


class CounterParseError(StoreError):
    """The stored counter is not a non-negative base-10 integer"""
