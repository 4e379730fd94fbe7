"""InvoiceFlow GST invoice tax computation and sequencing engine."""

__version__ = "1.0.0"
