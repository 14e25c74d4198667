from pydantic import BaseModel, Field


class ProjectRules(BaseModel):
    slug: str
    rules_version: str

class TrialConfigRule(BaseModel):
    type: str = "none"
    months: int = 12

class CalendarCutoff(BaseModel):
    month: int = Field(default=9, ge=1, le=12)
    day: int = Field(default=1, ge=1, le=28)

class MembershipRules(BaseModel):
    currency: str = "CAD"
    default_payment_months: int = Field(default=12, ge=1)
    trial_cutoff: CalendarCutoff = Field(default_factory=CalendarCutoff)
    trial_defaults: dict[str, TrialConfigRule]
    default_fees: dict[str, float]

class ForumRules(BaseModel):
    hot_decay_hours: float = Field(default=168.0, gt=0)
    comment_weight_factor: float = 10.0
    default_sort: str = "latest"

class CronRules(BaseModel):
    secret_env: str = "CRON_SECRET"

class OpsRules(BaseModel):
    data_dir_required: bool
    required_env: list[str]
    cron: CronRules = Field(default_factory=CronRules)

class Rules(BaseModel):
    project: ProjectRules
    membership: MembershipRules
    forum: ForumRules
    ops: OpsRules
