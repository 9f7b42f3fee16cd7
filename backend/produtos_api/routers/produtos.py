from decimal import Decimal

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.orm import Session

from produtos_api.database import get_db
from produtos_api.repositories import ProdutoRepository
from produtos_api.schemas import Produto, ProdutoCreate, ProdutoFilter, ProdutoList, ProdutoUpdate
from produtos_api.schemas.produto import SortField, SortOrder
from produtos_api.services import ImageStorageService, ImageUpload, ProdutoService, get_image_storage

router = APIRouter(prefix="/produtos", tags=["produtos"])


def get_produto_service(
    db: Session = Depends(get_db),
    images: ImageStorageService = Depends(get_image_storage),
) -> ProdutoService:
    return ProdutoService(ProdutoRepository(db), images)


def _build(schema, fields: dict):
    """Validate form fields against a schema, reporting errors like FastAPI does."""
    try:
        return schema(**fields)
    except SchemaValidationError as e:
        raise RequestValidationError(e.errors(include_url=False))


async def read_image(
    image: UploadFile | None = File(None),
    images: ImageStorageService = Depends(get_image_storage),
) -> ImageUpload | None:
    """Optional multipart `image` field, read into memory."""
    if image is None or not image.filename:
        return None
    # One byte past the limit is enough for validate() to reject it
    content = await image.read(images.max_bytes + 1)
    return ImageUpload(content=content, content_type=image.content_type or "", filename=image.filename)


def produto_create_form(
    name: str = Form(...),
    description: str = Form(...),
    price: Decimal = Form(...),
    category: str = Form(...),
    available: bool = Form(True),
    preparation_time: int = Form(0, alias="preparationTime"),
    ingredients: str | None = Form(None),
    allergens: str | None = Form(None),
    calories: int = Form(0),
    rating: float = Form(0),
    review_count: int = Form(0, alias="reviewCount"),
    store_id: str | None = Form(None, alias="storeId"),
) -> ProdutoCreate:
    return _build(ProdutoCreate, dict(
        name=name, description=description, price=price, category=category,
        available=available, preparation_time=preparation_time,
        ingredients=ingredients, allergens=allergens, calories=calories,
        rating=rating, review_count=review_count, store_id=store_id,
    ))


def produto_update_form(
    name: str | None = Form(None),
    description: str | None = Form(None),
    price: Decimal | None = Form(None),
    category: str | None = Form(None),
    available: bool | None = Form(None),
    preparation_time: int | None = Form(None, alias="preparationTime"),
    ingredients: str | None = Form(None),
    allergens: str | None = Form(None),
    calories: int | None = Form(None),
    rating: float | None = Form(None),
    review_count: int | None = Form(None, alias="reviewCount"),
    store_id: str | None = Form(None, alias="storeId"),
) -> ProdutoUpdate:
    fields = dict(
        name=name, description=description, price=price, category=category,
        available=available, preparation_time=preparation_time,
        ingredients=ingredients, allergens=allergens, calories=calories,
        rating=rating, review_count=review_count, store_id=store_id,
    )
    # Absent form fields stay unset so they are left untouched
    return _build(ProdutoUpdate, {k: v for k, v in fields.items() if v is not None})


def produto_filter_params(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    category: str | None = None,
    store_id: str | None = Query(None, alias="storeId"),
    available: str | None = None,
    sort_by: SortField = Query("createdAt", alias="sortBy"),
    sort_order: SortOrder = Query("desc", alias="sortOrder"),
) -> ProdutoFilter:
    return _build(ProdutoFilter, dict(
        page=page, limit=limit, category=category, store_id=store_id,
        available=available, sort_by=sort_by, sort_order=sort_order,
    ))


@router.post("", response_model=Produto, status_code=201)
def create_produto(
    data: ProdutoCreate = Depends(produto_create_form),
    image: ImageUpload | None = Depends(read_image),
    service: ProdutoService = Depends(get_produto_service),
):
    """Create a product, with an optional `image` upload."""
    return service.create(data, image)


@router.get("", response_model=ProdutoList)
def list_produtos(
    filters: ProdutoFilter = Depends(produto_filter_params),
    service: ProdutoService = Depends(get_produto_service),
):
    """List products with pagination, filters and sorting."""
    return service.list(filters)


@router.get("/{produto_id}", response_model=Produto)
def get_produto(produto_id: int, service: ProdutoService = Depends(get_produto_service)):
    """Get a specific product by ID."""
    return service.get(produto_id)


@router.put("/{produto_id}", response_model=Produto)
def update_produto(
    produto_id: int,
    data: ProdutoUpdate = Depends(produto_update_form),
    image: ImageUpload | None = Depends(read_image),
    service: ProdutoService = Depends(get_produto_service),
):
    """Update only the supplied fields; a new `image` replaces the old one."""
    return service.update(produto_id, data, image)


@router.delete("/{produto_id}")
def delete_produto(produto_id: int, service: ProdutoService = Depends(get_produto_service)):
    """Delete a product and its stored image."""
    service.delete(produto_id)
    return {"message": "Produto deleted", "id": produto_id}
