"""Services, SQL repositories, calculators and payment checks for a template shop's back office."""

__version__ = "0.1.0"