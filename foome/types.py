"""Enums and type aliases for Foome."""

from enum import StrEnum


class ErrorCode(StrEnum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    AUTHORIZATION_ERROR = "AUTHORIZATION_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOURCE_CONFLICT = "RESOURCE_CONFLICT"
    RATE_LIMITED = "RATE_LIMITED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class EmployeeStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    VACATION = "vacation"
    TERMINATED = "terminated"


class ContractType(StrEnum):
    CLT = "clt"
    PJ = "pj"
    INTERN = "intern"
    TEMPORARY = "temporary"
    OTHER = "other"


class OnboardingStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"


class OnboardingCategory(StrEnum):
    DOCUMENTATION = "documentation"
    TRAINING = "training"
    EQUIPMENT = "equipment"
    SYSTEM_ACCESS = "system_access"
    INTRODUCTION = "introduction"
    OTHER = "other"


class DocumentStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DocumentType(StrEnum):
    RG = "rg"
    CPF = "cpf"
    CTPS = "ctps"
    PIS = "pis"
    TITULO_ELEITOR = "titulo_eleitor"
    RESERVISTA = "reservista"
    COMPROVANTE_RESIDENCIA = "comprovante_residencia"
    DIPLOMA = "diploma"
    CERTIFICADO = "certificado"
    CARTEIRA_VACINACAO = "carteira_vacinacao"
    ATESTADO_MEDICO = "atestado_medico"
    CONTRATO = "contrato"
    OUTROS = "outros"


class DependentRelationship(StrEnum):
    CHILD = "child"
    SPOUSE = "spouse"
    PARTNER = "partner"
    PARENT = "parent"
    SIBLING = "sibling"
    OTHER = "other"


class Gender(StrEnum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class CompanySize(StrEnum):
    MICRO = "1-10"
    SMALL = "11-50"
    MEDIUM = "51-200"
    LARGE = "201-500"
    ENTERPRISE = "500+"


class TimeOffType(StrEnum):
    VACATION = "vacation"
    SICK_LEAVE = "sick_leave"
    MATERNITY_LEAVE = "maternity_leave"
    PATERNITY_LEAVE = "paternity_leave"
    BEREAVEMENT = "bereavement"
    PERSONAL = "personal"
    OTHER = "other"


class TimeOffStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
