"""Clustering of submitted variants (SS) into reference SNP clusters (RS)."""
