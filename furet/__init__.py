# file: furet/__init__.py

"""
furet: encrypt or decrypt line-oriented data with Fernet tokens.

Packages:
    module1_encoding  URL-safe base64
    module2_keys      32-byte key material
    module3_token     token encrypt / verify / decrypt
    module4_pipeline  line-by-line processing
"""

__version__ = '1.0.0'
