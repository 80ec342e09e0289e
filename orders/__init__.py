"""orders/ -- Catalog orders: domain model, status workflow, store, use cases.

Layer rule: orders/ may import from auth/ and core/. It does NOT import from
api/. auth/ never imports from orders/.
"""
