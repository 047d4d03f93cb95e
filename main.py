import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError

import analytics
import credentials
import database
import repository
from database import get_db, create_document, get_documents, to_public
from errors import ServiceError, InvalidArgument, Internal
from schemas import Credentials, Customer, CustomerUpdate, Product, ProductUpdate, Order

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if analytics.ANALYTICS_COLLECTION not in analytics.RECORD_COLLECTIONS:
        raise RuntimeError(f"ANALYTICS_COLLECTION must be one of {analytics.RECORD_COLLECTIONS}")
    db = database.connect()
    database.ensure_indexes(db)
    app.state.db = db
    yield
    db.client.close()
    logger.info("MongoDB connection closed")


app = FastAPI(
    title="E-commerce API",
    description="API for E-commerce application",
    version="1.0.0",
    docs_url="/api-docs",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Errors
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return await service_error_handler(request, InvalidArgument(problems))


@app.exception_handler(PyMongoError)
async def store_error_handler(request: Request, exc: PyMongoError):
    logger.error("Store error on %s %s: %s", request.method, request.url.path, exc)
    return await service_error_handler(request, Internal(str(exc)))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return await service_error_handler(request, Internal())


# Health
@app.get("/")
def read_root():
    return {"message": "E-commerce Backend running"}


@app.get("/test")
def test_database(db: Database = Depends(get_db)):
    try:
        return {"backend": "ok", "db": "ok", "collections": db.list_collection_names()}
    except PyMongoError as e:
        return {"backend": "ok", "db": f"error: {str(e)[:80]}"}


# Auth (sessionless - login only acknowledges)
@app.post("/auth/signup", status_code=201)
def signup(creds: Credentials, db: Database = Depends(get_db)):
    credentials.signup(db, creds.username, creds.password)
    return {"message": "User created successfully"}


@app.post("/auth/login")
def login(creds: Credentials, db: Database = Depends(get_db)):
    credentials.login(db, creds.username, creds.password)
    return {"message": "Login successful"}


# Customers
@app.post("/customers", status_code=201)
def create_customer(customer: Customer, db: Database = Depends(get_db)):
    return {"id": repository.customers(db).create(customer)}


@app.get("/customers")
def list_customers(db: Database = Depends(get_db)):
    return [to_public(d) for d in repository.customers(db).list_all()]


@app.get("/customers/nearby")
def nearby_customers(
    longitude: float,
    latitude: float,
    maxDistance: float = Query(..., description="Radius in meters"),
    db: Database = Depends(get_db),
):
    return [to_public(d) for d in analytics.nearby_customers(db, longitude, latitude, maxDistance)]


@app.get("/customers/{name}")
def get_customer(name: str, db: Database = Depends(get_db)):
    return to_public(repository.customers(db).get_by_name(name))


@app.put("/customers/{name}")
def update_customer(name: str, update: CustomerUpdate, db: Database = Depends(get_db)):
    fields = update.model_dump(include=update.model_fields_set)
    repository.customers(db).update_by_name(name, fields)
    return {"message": "Customer updated successfully"}


@app.delete("/customers/{name}")
def delete_customer(name: str, db: Database = Depends(get_db)):
    repository.customers(db).delete_by_name(name)
    return {"message": "Customer deleted successfully"}


# Products
@app.post("/products", status_code=201)
def create_product(product: Product, db: Database = Depends(get_db)):
    return {"id": repository.products(db).create(product)}


@app.get("/products")
def list_products(db: Database = Depends(get_db)):
    return [to_public(d) for d in repository.products(db).list_all()]


@app.get("/products/search")
def search_products(query: str, db: Database = Depends(get_db)):
    return [to_public(d) for d in analytics.search_products(db, query)]


@app.get("/products/{name}")
def get_product(name: str, db: Database = Depends(get_db)):
    return to_public(repository.products(db).get_by_name(name))


@app.put("/products/{name}")
def update_product(name: str, update: ProductUpdate, db: Database = Depends(get_db)):
    fields = update.model_dump(include=update.model_fields_set)
    repository.products(db).update_by_name(name, fields)
    return {"message": "Product updated successfully"}


@app.delete("/products/{name}")
def delete_product(name: str, db: Database = Depends(get_db)):
    repository.products(db).delete_by_name(name)
    return {"message": "Product deleted successfully"}


# Orders
@app.post("/orders", status_code=201)
def create_order(order: Order, db: Database = Depends(get_db)):
    order_id = create_document(db, "orders", order)
    logger.info("Created order %s", order_id)
    return {"id": order_id}


@app.get("/orders")
def list_orders(db: Database = Depends(get_db)):
    return [to_public(d) for d in get_documents(db, "orders")]


# Analytics
@app.get("/analytics/top-products")
def top_products(limit: int = Query(5, ge=1, le=100), db: Database = Depends(get_db)):
    return analytics.top_products(db, limit)


@app.get("/analytics/sales")
def sales(start: str, end: str, db: Database = Depends(get_db)):
    return analytics.sales_by_date_range(db, start, end)


@app.get("/analytics/product-sales")
def product_sales(productName: str, start: str, end: str, db: Database = Depends(get_db)):
    return analytics.product_sales_by_date_range(db, productName, start, end)


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
