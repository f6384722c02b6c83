from common.app_config import CommonConfig


class LabelsConfig(CommonConfig):
    name = "labels"
