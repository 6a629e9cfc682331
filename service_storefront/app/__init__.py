"""
Storefront Service package for the Storefront Access Layer.

The service fronts storefront client requests to the commerce platform:
- Catalog reads via the platform GraphQL API, cached in process memory
- Revenue and customer aggregations over the admin REST API
- Expiry sweeping and scheduled pre-warming of the hot product listing

Structure:
- app.main: FastAPI app, routes, and lifecycle wiring.
- app.adapters: HTTP clients for the upstream platform.
- app.caching: Cache store, read-through manager, sweeper, pre-warmer.
- app.catalog: Product queries, reshaping, and read operations.
- app.revenue: Order total aggregation.
- app.customers: Customer counts, order history and purchase insights.
"""
