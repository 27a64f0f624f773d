from typing import Optional

from ..base import PipelineStage, StageContext
from ...core.enums import StageType


LICENSE = """ * Copyright (c) Facebook, Inc. and its affiliates.
 *
 * This source code is licensed under the MIT license found in the
 * LICENSE file in the root directory of this source tree."""

LICENSE_BANNER = f"""/**
{LICENSE}
  *
  * @noflow
  * @nolint
  * @preventMunge
  * @preserve-invariant-messages
  */

"""


class BannerStage(PipelineStage):
    """Prepends the license block and hosting annotations"""

    @property
    def stage_type(self) -> StageType:
        return StageType.BANNER

    async def render_chunk(self, code: str, context: StageContext) -> Optional[str]:
        return LICENSE_BANNER + code
