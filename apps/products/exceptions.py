"""
Errors raised by the catalog services.

All of them are recoverable and reported back to the caller, either as a JSON
error body (storefront and API) or as an admin message.
"""


class CatalogError(Exception):
    code = 'CatalogError'
    status_code = 400
    default_message = 'The request could not be processed.'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_dict(self):
        return {'status': 'error', 'code': self.code, 'message': self.message}


class NoMatchingVariation(CatalogError):
    code = 'NoMatchingVariation'
    default_message = 'The selected options do not correspond to an available variation.'


class InvalidSelection(CatalogError):
    code = 'InvalidSelection'
    default_message = 'The selection is not valid for this product.'


class OutOfStock(CatalogError):
    code = 'OutOfStock'
    status_code = 409
    default_message = 'Sorry this product is currently out of stock. Please check back soon.'


class VariationsDisabledError(CatalogError):
    code = 'VariationsDisabledError'
    default_message = (
        'Cannot publish product when no variations are enabled. '
        'Please enable some product variations and try again.'
    )
