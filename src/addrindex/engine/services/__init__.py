"""Explorer services: node calls composed with the ledger reconciler and paginator."""
