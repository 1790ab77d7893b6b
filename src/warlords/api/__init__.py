"""HTTP interface for Warlords."""
