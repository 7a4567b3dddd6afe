"""nationwide-report — Turn dealer inventory sheets into the nationwide report."""

__version__ = "0.2.0"

OUTPUT_HEADERS: list[str] = [
    "State", "City", "Yr", "Make", "Model", "Trim", "Drive",
    "Vin", "Color", "Miles", "Price", "MSRP", "Notes", "Notes2",
]
