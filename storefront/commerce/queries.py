"""
Documents GraphQL de l'API Storefront Shopify.
Les fragments sont partagés pour que toutes les mutations panier renvoient la même forme de Cart.
"""

IMAGE_FIELDS = """
    id
    url
    altText
    width
    height
"""

PRODUCT_FRAGMENT = f"""
  fragment ProductFragment on Product {{
    id
    handle
    title
    description
    descriptionHtml
    vendor
    productType
    tags
    availableForSale
    priceRange {{
      minVariantPrice {{ amount currencyCode }}
      maxVariantPrice {{ amount currencyCode }}
    }}
    images(first: 10) {{
      edges {{ node {{ {IMAGE_FIELDS} }} }}
    }}
    variants(first: 50) {{
      edges {{
        node {{
          id
          title
          availableForSale
          quantityAvailable
          price {{ amount currencyCode }}
          compareAtPrice {{ amount currencyCode }}
          image {{ {IMAGE_FIELDS} }}
          selectedOptions {{ name value }}
        }}
      }}
    }}
    options {{ id name values }}
  }}
"""

CART_FRAGMENT = f"""
  fragment CartFragment on Cart {{
    id
    checkoutUrl
    totalQuantity
    discountCodes {{ code applicable }}
    cost {{
      totalAmount {{ amount currencyCode }}
      subtotalAmount {{ amount currencyCode }}
      totalTaxAmount {{ amount currencyCode }}
    }}
    lines(first: 50) {{
      edges {{
        node {{
          id
          quantity
          cost {{
            totalAmount {{ amount currencyCode }}
            amountPerQuantity {{ amount currencyCode }}
          }}
          merchandise {{
            ... on ProductVariant {{
              id
              title
              availableForSale
              quantityAvailable
              price {{ amount currencyCode }}
              compareAtPrice {{ amount currencyCode }}
              image {{ {IMAGE_FIELDS} }}
              product {{ id title handle }}
              selectedOptions {{ name value }}
            }}
          }}
        }}
      }}
    }}
  }}
"""

ADDRESS_FIELDS = """
    id
    firstName
    lastName
    company
    address1
    address2
    city
    province
    provinceCode
    country
    countryCodeV2
    zip
    phone
"""

# --- Catalogue ---

GET_PRODUCTS = PRODUCT_FRAGMENT + """
  query GetProducts($first: Int!, $after: String) {
    products(first: $first, after: $after) {
      pageInfo { hasNextPage endCursor }
      edges { node { ...ProductFragment } }
    }
  }
"""

GET_PRODUCT_BY_HANDLE = PRODUCT_FRAGMENT + """
  query GetProduct($handle: String!) {
    productByHandle(handle: $handle) { ...ProductFragment }
  }
"""

GET_COLLECTIONS = f"""
  query GetCollections($first: Int!) {{
    collections(first: $first) {{
      edges {{
        node {{
          id
          handle
          title
          description
          image {{ {IMAGE_FIELDS} }}
        }}
      }}
    }}
  }}
"""

GET_COLLECTION_BY_HANDLE = PRODUCT_FRAGMENT + f"""
  query GetCollection($handle: String!, $first: Int!, $after: String) {{
    collectionByHandle(handle: $handle) {{
      id
      handle
      title
      description
      image {{ {IMAGE_FIELDS} }}
      products(first: $first, after: $after) {{
        edges {{ node {{ ...ProductFragment }} cursor }}
        pageInfo {{ hasNextPage endCursor }}
      }}
    }}
  }}
"""

GET_COLLECTION_PRODUCT_COUNT = """
  query GetCollectionProductCount($handle: String!, $first: Int!, $after: String) {
    collectionByHandle(handle: $handle) {
      products(first: $first, after: $after) {
        edges { node { id } cursor }
        pageInfo { hasNextPage endCursor }
      }
    }
  }
"""

SEARCH_PRODUCTS = PRODUCT_FRAGMENT + """
  query SearchProducts($query: String!, $first: Int!) {
    products(first: $first, query: $query) {
      edges { node { ...ProductFragment } }
    }
  }
"""

# --- Panier ---

CART_CREATE = CART_FRAGMENT + """
  mutation CreateCart {
    cartCreate {
      cart { ...CartFragment }
      userErrors { field message }
    }
  }
"""

GET_CART = CART_FRAGMENT + """
  query GetCart($cartId: ID!) {
    cart(id: $cartId) { ...CartFragment }
  }
"""

CART_LINES_ADD = CART_FRAGMENT + """
  mutation AddToCart($cartId: ID!, $lines: [CartLineInput!]!) {
    cartLinesAdd(cartId: $cartId, lines: $lines) {
      cart { ...CartFragment }
      userErrors { field message }
    }
  }
"""

CART_LINES_UPDATE = CART_FRAGMENT + """
  mutation UpdateCartLine($cartId: ID!, $lines: [CartLineUpdateInput!]!) {
    cartLinesUpdate(cartId: $cartId, lines: $lines) {
      cart { ...CartFragment }
      userErrors { field message }
    }
  }
"""

CART_LINES_REMOVE = CART_FRAGMENT + """
  mutation RemoveFromCart($cartId: ID!, $lineIds: [ID!]!) {
    cartLinesRemove(cartId: $cartId, lineIds: $lineIds) {
      cart { ...CartFragment }
      userErrors { field message }
    }
  }
"""

CART_DISCOUNT_CODES_UPDATE = CART_FRAGMENT + """
  mutation CartDiscountCodesUpdate($cartId: ID!, $discountCodes: [String!]) {
    cartDiscountCodesUpdate(cartId: $cartId, discountCodes: $discountCodes) {
      cart { ...CartFragment }
      userErrors { field message }
    }
  }
"""

# --- Clients ---

CUSTOMER_LOGIN = """
  mutation CustomerLogin($input: CustomerAccessTokenCreateInput!) {
    customerAccessTokenCreate(input: $input) {
      customerAccessToken { accessToken expiresAt }
      customerUserErrors { code field message }
    }
  }
"""

CUSTOMER_CREATE = """
  mutation CustomerCreate($input: CustomerCreateInput!) {
    customerCreate(input: $input) {
      customer { id }
      customerUserErrors { code field message }
    }
  }
"""

CUSTOMER_RECOVER = """
  mutation CustomerRecover($email: String!) {
    customerRecover(email: $email) {
      customerUserErrors { code field message }
    }
  }
"""

CUSTOMER_DELETE = """
  mutation CustomerDelete($customerAccessToken: String!) {
    customerDelete(customerAccessToken: $customerAccessToken) {
      deletedCustomerId
      userErrors { field message }
    }
  }
"""

CUSTOMER_UPDATE = """
  mutation CustomerUpdate($customerAccessToken: String!, $customer: CustomerUpdateInput!) {
    customerUpdate(customerAccessToken: $customerAccessToken, customer: $customer) {
      customer { id firstName lastName email phone acceptsMarketing }
      customerAccessToken { accessToken expiresAt }
      customerUserErrors { code field message }
    }
  }
"""

GET_CUSTOMER = f"""
  query GetCustomer($customerAccessToken: String!) {{
    customer(customerAccessToken: $customerAccessToken) {{
      id
      email
      firstName
      lastName
      displayName
      phone
      acceptsMarketing
      defaultAddress {{ {ADDRESS_FIELDS} }}
      addresses(first: 10) {{
        edges {{ node {{ {ADDRESS_FIELDS} }} }}
      }}
    }}
  }}
"""

GET_CUSTOMER_ORDERS = """
  query GetCustomerOrders($customerAccessToken: String!, $first: Int!) {
    customer(customerAccessToken: $customerAccessToken) {
      orders(first: $first, sortKey: PROCESSED_AT, reverse: true) {
        edges {
          node {
            id
            orderNumber
            name
            processedAt
            financialStatus
            fulfillmentStatus
            totalPrice { amount currencyCode }
            subtotalPrice { amount currencyCode }
            totalShippingPrice { amount currencyCode }
            totalTax { amount currencyCode }
            currencyCode
            statusUrl
            lineItems(first: 50) {
              edges {
                node {
                  title
                  quantity
                  variant {
                    id
                    title
                    image { url altText }
                    price { amount currencyCode }
                  }
                }
              }
            }
            shippingAddress {
              firstName lastName address1 address2 city province country zip phone
            }
          }
        }
      }
    }
  }
"""

# --- Adresses ---

CUSTOMER_ADDRESS_CREATE = """
  mutation CustomerAddressCreate($customerAccessToken: String!, $address: MailingAddressInput!) {
    customerAddressCreate(customerAccessToken: $customerAccessToken, address: $address) {
      customerAddress { id }
      customerUserErrors { field message }
    }
  }
"""

CUSTOMER_ADDRESS_UPDATE = """
  mutation CustomerAddressUpdate($customerAccessToken: String!, $id: ID!, $address: MailingAddressInput!) {
    customerAddressUpdate(customerAccessToken: $customerAccessToken, id: $id, address: $address) {
      customerAddress { id }
      customerUserErrors { field message }
    }
  }
"""

CUSTOMER_ADDRESS_DELETE = """
  mutation CustomerAddressDelete($customerAccessToken: String!, $id: ID!) {
    customerAddressDelete(customerAccessToken: $customerAccessToken, id: $id) {
      deletedCustomerAddressId
      customerUserErrors { field message }
    }
  }
"""

CUSTOMER_DEFAULT_ADDRESS_UPDATE = """
  mutation CustomerDefaultAddressUpdate($customerAccessToken: String!, $addressId: ID!) {
    customerDefaultAddressUpdate(customerAccessToken: $customerAccessToken, addressId: $addressId) {
      customer { defaultAddress { id } }
      customerUserErrors { field message }
    }
  }
"""
