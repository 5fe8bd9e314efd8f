"""Application endpoints"""

from fastapi import APIRouter, Body, Query, Response

from appconfig.core.config import logger
from appconfig.core.dependencies import ApplicationServiceDep
from appconfig.schemas.application import Application, ApplicationStatus, AttributeFamily
from appconfig.schemas.command import Command
from appconfig.services import ApplicationConfigService

router = APIRouter()

# Service method names per family: add, get, replace, clear, discard
FAMILY_OPERATIONS = {
    AttributeFamily.CONFIGS: (
        "add_configs_to_application",
        "get_configs_for_application",
        "update_configs_for_application",
        "remove_all_configs_for_application",
        "remove_config_for_application",
    ),
    AttributeFamily.JARS: (
        "add_jars_for_application",
        "get_jars_for_application",
        "update_jars_for_application",
        "remove_all_jars_for_application",
        "remove_jar_for_application",
    ),
    AttributeFamily.TAGS: (
        "add_tags_for_application",
        "get_tags_for_application",
        "update_tags_for_application",
        "remove_all_tags_for_application",
        "remove_tag_for_application",
    ),
}


def _operation(service: ApplicationConfigService, family: AttributeFamily, index: int):
    return getattr(service, FAMILY_OPERATIONS[family][index])


@router.post("", response_model=Application, status_code=201)
async def create_application(
    service: ApplicationServiceDep,
    response: Response,
    app: Application = Body(...),
):
    """Create an application; the Location header points at the new resource"""
    created = await service.create_application(app)
    response.headers["Location"] = f"/api/v1/applications/{created.id}"
    return created


@router.get("", response_model=list[Application])
async def get_applications(
    service: ApplicationServiceDep,
    name: str | None = None,
    user_name: str | None = Query(None, alias="userName"),
    status: list[ApplicationStatus] | None = Query(None),
    tag: list[str] | None = Query(None),
    page: int = 0,
    limit: int | None = None,
    descending: bool = True,
    order_by: list[str] | None = Query(None, alias="orderBy"),
):
    """
    List applications

    Args:
        name: Exact name, ``%`` matches any run of characters
        user_name: Exact user
        status: Any of these statuses
        tag: All of these tags
        page: Zero-based page number
        limit: Page size
        descending: Sort direction for every key
        order_by: Sort fields, primary first
    """
    return await service.get_applications(
        name=name,
        user_name=user_name,
        statuses=status,
        tags=tag,
        page=page,
        limit=limit,
        descending=descending,
        order_bys=order_by,
    )


@router.delete("", response_model=list[Application])
async def delete_all_applications(service: ApplicationServiceDep):
    """Delete every application"""
    removed = await service.delete_all_applications()
    logger.info(f"Deleted {len(removed)} applications via API")
    return removed


@router.get("/{id}", response_model=Application)
async def get_application(id: str, service: ApplicationServiceDep):
    return await service.get_application(id)


@router.put("/{id}", response_model=Application)
async def update_application(
    id: str,
    service: ApplicationServiceDep,
    update_app: Application = Body(...),
):
    return await service.update_application(id, update_app)


@router.delete("/{id}", response_model=Application)
async def delete_application(id: str, service: ApplicationServiceDep):
    return await service.delete_application(id)


@router.get("/{id}/commands", response_model=list[Command])
async def get_commands_for_application(id: str, service: ApplicationServiceDep):
    """Commands referencing the application"""
    commands = await service.get_commands_for_application(id)
    return sorted(commands, key=lambda command: command.id)


@router.post("/{id}/{family}", response_model=list[str])
async def add_items(
    id: str,
    family: AttributeFamily,
    service: ApplicationServiceDep,
    items: list[str] = Body(...),
):
    """Add items to a config, jar or tag set"""
    return sorted(await _operation(service, family, 0)(id, set(items)))


@router.get("/{id}/{family}", response_model=list[str])
async def get_items(id: str, family: AttributeFamily, service: ApplicationServiceDep):
    return sorted(await _operation(service, family, 1)(id))


@router.put("/{id}/{family}", response_model=list[str])
async def replace_items(
    id: str,
    family: AttributeFamily,
    service: ApplicationServiceDep,
    items: list[str] = Body(...),
):
    """Replace a config, jar or tag set"""
    return sorted(await _operation(service, family, 2)(id, set(items)))


@router.delete("/{id}/{family}", response_model=list[str])
async def clear_items(id: str, family: AttributeFamily, service: ApplicationServiceDep):
    return sorted(await _operation(service, family, 3)(id))


@router.delete("/{id}/{family}/{item:path}", response_model=list[str])
async def discard_item(
    id: str,
    family: AttributeFamily,
    item: str,
    service: ApplicationServiceDep,
):
    """Remove one item; removing an absent item is a no-op"""
    return sorted(await _operation(service, family, 4)(id, item))
