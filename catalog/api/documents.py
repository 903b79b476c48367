from fastapi import APIRouter, Body, Depends, HTTPException, Request, status
from pymongo.database import Database
from typing import Any, Union

from catalog.database import get_database
from catalog.services.document_service import DocumentRepository, InvalidCollectionError
from catalog.services.exceptions import DocumentNotFoundError

router = APIRouter(tags=["Documents"])

DocumentBody = Union[dict[str, Any], list[dict[str, Any]]]


def _query_params(request: Request) -> dict[str, str]:
    # Repeated keys keep the last value
    return dict(request.query_params)


def _not_found(e: DocumentNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _bad_collection(e: InvalidCollectionError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get(
    "/{collection}",
    summary="List documents",
    description="""
    List the documents of a collection.

    Filters use bracketed operators: `field[op]=value` with `op` one of
    `eq, neq, gt, gte, lt, lte, like, ilike, in`. `order=field.asc|field.desc`
    sorts and `limit=N` caps the result. `select` is accepted and ignored.
    """
)
def list_documents(collection: str, request: Request, db: Database = Depends(get_database)):
    """List documents with `id` in place of the store's `_id`."""
    repository = DocumentRepository(db)
    try:
        return repository.list(collection, _query_params(request))
    except InvalidCollectionError as e:
        raise _bad_collection(e)


@router.get("/{collection}/{document_id}", summary="Get a document by ID")
def get_document(collection: str, document_id: str, db: Database = Depends(get_database)):
    """Get a single document; 404 when it doesn't exist."""
    repository = DocumentRepository(db)
    try:
        return repository.get(collection, document_id)
    except DocumentNotFoundError as e:
        raise _not_found(e)
    except InvalidCollectionError as e:
        raise _bad_collection(e)


@router.post(
    "/{collection}",
    summary="Insert documents",
    description="Insert one document or an array of documents. Client ids are ignored."
)
def insert_documents(
    collection: str,
    payload: DocumentBody = Body(...),
    db: Database = Depends(get_database)
):
    """
    Insert documents.

    `created_at` is stamped when missing. The response mirrors the request:
    one document in, one document out; an array in, an array out.
    """
    repository = DocumentRepository(db)
    try:
        return repository.insert(collection, payload)
    except InvalidCollectionError as e:
        raise _bad_collection(e)


@router.patch(
    "/{collection}",
    summary="Update matching documents",
    description="Merge the body into every document matching the filters."
)
def update_documents(
    collection: str,
    request: Request,
    changes: dict[str, Any] = Body(...),
    db: Database = Depends(get_database)
):
    """`id`, `_id` and `created_at` in the body are ignored."""
    repository = DocumentRepository(db)
    try:
        return repository.update(collection, _query_params(request), changes)
    except InvalidCollectionError as e:
        raise _bad_collection(e)


@router.patch("/{collection}/{document_id}", summary="Update a document by ID")
def update_document(
    collection: str,
    document_id: str,
    changes: dict[str, Any] = Body(...),
    db: Database = Depends(get_database)
):
    """Merge the body into one document; 404 when it doesn't exist."""
    repository = DocumentRepository(db)
    try:
        return repository.update_by_id(collection, document_id, changes)
    except DocumentNotFoundError as e:
        raise _not_found(e)
    except InvalidCollectionError as e:
        raise _bad_collection(e)


@router.delete("/{collection}", summary="Delete matching documents")
def delete_documents(collection: str, request: Request, db: Database = Depends(get_database)):
    """Delete every document matching the filters and return them."""
    repository = DocumentRepository(db)
    try:
        return repository.delete(collection, _query_params(request))
    except InvalidCollectionError as e:
        raise _bad_collection(e)


@router.delete("/{collection}/{document_id}", summary="Delete a document by ID")
def delete_document(collection: str, document_id: str, db: Database = Depends(get_database)):
    """Delete one document and return it; 404 when it doesn't exist."""
    repository = DocumentRepository(db)
    try:
        return repository.delete_by_id(collection, document_id)
    except DocumentNotFoundError as e:
        raise _not_found(e)
    except InvalidCollectionError as e:
        raise _bad_collection(e)
