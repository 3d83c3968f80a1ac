"""GPS fix enrichment and track anomaly detection service"""
