"""Health Wallet: personal health records API."""
