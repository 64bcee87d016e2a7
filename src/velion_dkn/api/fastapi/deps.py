from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from velion_dkn.app.settings import AppSettings
from velion_dkn.documents.review import ReviewWorkflow
from velion_dkn.documents.service import DocumentCatalog
from velion_dkn.users.directory import UserDirectory


def get_app_settings_state(request: Request) -> AppSettings:
    return request.app.state.app_settings


def get_catalog(request: Request) -> DocumentCatalog:
    return request.app.state.catalog


def get_review_workflow(request: Request) -> ReviewWorkflow:
    return request.app.state.review


def get_directory(request: Request) -> UserDirectory:
    return request.app.state.directory


SettingsDep = Annotated[AppSettings, Depends(get_app_settings_state)]
CatalogDep = Annotated[DocumentCatalog, Depends(get_catalog)]
ReviewDep = Annotated[ReviewWorkflow, Depends(get_review_workflow)]
DirectoryDep = Annotated[UserDirectory, Depends(get_directory)]
