"""Cross-reference pricing terms with the products they price."""

import dataclasses
import logging

from ec2_pricing.catalog.models import PriceCatalog, Term

logger = logging.getLogger("ec2_pricing.catalog.linker")


def link_terms(catalog: PriceCatalog) -> PriceCatalog:
    """Attach each term to the product with the same SKU.

    Terms whose SKU has no product keep ``product=None``; term and product
    data in the upstream feed are not always consistent, so this is not an
    error.

    Args:
        catalog: Decoded catalog with unlinked terms

    Returns:
        A new PriceCatalog whose terms reference their products. The input
        catalog is left as it was.
    """
    products = catalog.products
    linked: dict[str, dict[str, dict[str, Term]]] = {}
    unmatched = 0

    for term_type, by_sku in catalog.terms.items():
        linked[term_type] = {}
        for sku, terms in by_sku.items():
            linked[term_type][sku] = {}
            for key, term in terms.items():
                product = products.get(term.sku)
                if product is None:
                    unmatched += 1
                linked[term_type][sku][key] = dataclasses.replace(term, product=product)

    if unmatched:
        logger.debug(f"{unmatched} terms reference SKUs without a product")

    return dataclasses.replace(catalog, terms=linked)
