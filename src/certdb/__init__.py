"""
certdb — certificate database parser.

Decodes the packed certificate records of a certs.db image (signature,
fixed-size body, public key), validates the database header and the
presence of the certificates needed to build signed content packages,
and serves them from a name-keyed registry.

Built on the Railway-Oriented Programming (ROP) framework for
explicit, composable, functional error handling.
"""

__version__ = "0.1.0"
