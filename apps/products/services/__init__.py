"""
Catalog services: stock ledger, variation matching, price resolution,
cart line building and publish validation.
"""
