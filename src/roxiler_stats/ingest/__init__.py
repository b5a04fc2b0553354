"""Seed ingestion: download the transaction dump and replace the dataset."""
