"""Batch processor for deposits, withdrawals, disputes and chargebacks over per-client balances."""
