"""
GraphQL documents sent to the catalog API.
"""

QUICK_PRODUCTS_PAGE_SIZE = 250

QUICK_PRODUCTS_QUERY = """
query quickProducts($first: Int!) {
  products(first: $first, sortKey: BEST_SELLING) {
    edges {
      node {
        id
        title
        handle
        priceRange {
          minVariantPrice {
            amount
          }
        }
        featuredImage {
          url(transform: {maxWidth: 150, maxHeight: 150, preferredContentType: WEBP})
        }
        availableForSale
      }
    }
  }
}
"""

PRODUCT_DETAIL_FIELDS = """
  id
  title
  description
  handle
  productType
  tags
  featuredImage {
    url(transform: {maxWidth: 800, maxHeight: 800, preferredContentType: WEBP})
  }
  images(first: 5) {
    edges {
      node {
        url(transform: {maxWidth: 800, maxHeight: 800, preferredContentType: WEBP})
        altText
      }
    }
  }
  priceRange {
    minVariantPrice {
      amount
      currencyCode
    }
  }
  variants(first: 10) {
    edges {
      node {
        id
        title
        price {
          amount
          currencyCode
        }
        availableForSale
      }
    }
  }
  availableForSale
"""

PRODUCT_BY_ID_QUERY = f"""
query getProductById($id: ID!) {{
  product(id: $id) {{{PRODUCT_DETAIL_FIELDS}  }}
}}
"""

PRODUCT_BY_HANDLE_QUERY = f"""
query getProductByHandle($handle: String!) {{
  productByHandle(handle: $handle) {{{PRODUCT_DETAIL_FIELDS}  }}
}}
"""

PRODUCT_SUMMARY_FIELDS = """
  id
  title
  handle
  priceRange {
    minVariantPrice {
      amount
      currencyCode
    }
  }
  images(first: 1) {
    edges {
      node {
        url(transform: {maxWidth: 300, maxHeight: 300})
        altText
      }
    }
  }
  availableForSale
"""

SEARCH_PRODUCTS_QUERY = f"""
query searchProducts($query: String!, $first: Int!) {{
  products(first: $first, query: $query, sortKey: RELEVANCE) {{
    edges {{
      node {{{PRODUCT_SUMMARY_FIELDS}      }}
    }}
  }}
}}
"""

LIST_PRODUCTS_QUERY = """
query listProducts($first: Int!, $sortKey: ProductSortKeys!, $reverse: Boolean!, $query: String) {
  products(first: $first, sortKey: $sortKey, reverse: $reverse, query: $query) {
    edges {
      node {
        id
        title
        description
        handle
        productType
        tags
        priceRange {
          minVariantPrice {
            amount
            currencyCode
          }
        }
        images(first: 1) {
          edges {
            node {
              url(transform: {maxWidth: 400, maxHeight: 400})
              altText
            }
          }
        }
        variants(first: 5) {
          edges {
            node {
              id
              title
              price {
                amount
                currencyCode
              }
              availableForSale
            }
          }
        }
        availableForSale
      }
    }
  }
}
"""

SHOP_QUERY = """
query shopInfo {
  shop {
    name
    primaryDomain {
      url
    }
  }
}
"""


def build_batch_query(count: int, by: str) -> str:
    """Build one aliased lookup per identifier, bound through variables."""
    if by == "handle":
        variables = ", ".join(f"$handle{i}: String!" for i in range(count))
        lookups = "\n".join(
            f"  product{i}: productByHandle(handle: $handle{i}) {{{PRODUCT_SUMMARY_FIELDS}  }}"
            for i in range(count)
        )
    else:
        variables = ", ".join(f"$id{i}: ID!" for i in range(count))
        lookups = "\n".join(
            f"  product{i}: product(id: $id{i}) {{{PRODUCT_SUMMARY_FIELDS}  }}"
            for i in range(count)
        )
    return f"query batchProducts({variables}) {{\n{lookups}\n}}\n"
