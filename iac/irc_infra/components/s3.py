"""S3 bucket serving the compiled client as a static website."""
from __future__ import annotations

from typing import List, Sequence

import pulumi
from pulumi import ResourceOptions
from pulumi_aws import s3

from ..files import SiteObject

__all__ = ["StaticSite"]


class StaticSite(pulumi.ComponentResource):
    """Website bucket with one object per client file.

    ``index.html`` is both the index and the error document so client side
    routes resolve.
    """

    bucket: s3.BucketV2
    objects: List[s3.BucketObject]
    bucket_id: pulumi.Output[str]
    bucket_arn: pulumi.Output[str]
    website_endpoint: pulumi.Output[str]

    def __init__(
        self,
        name: str,
        *,
        site_objects: Sequence[SiteObject],
        index_document: str = "index.html",
        force_destroy: bool = True,
        opts: ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:storage:StaticSite", name, None, opts)

        child_opts = ResourceOptions(parent=self)

        self.bucket = s3.BucketV2(
            f"{name}-bucket",
            force_destroy=force_destroy,
            tags={"Name": f"{name}-bucket"},
            opts=child_opts,
        )

        website = s3.BucketWebsiteConfigurationV2(
            f"{name}-website",
            bucket=self.bucket.id,
            index_document=s3.BucketWebsiteConfigurationV2IndexDocumentArgs(suffix=index_document),
            error_document=s3.BucketWebsiteConfigurationV2ErrorDocumentArgs(key=index_document),
            opts=child_opts,
        )

        s3.BucketCorsConfigurationV2(
            f"{name}-cors",
            bucket=self.bucket.id,
            cors_rules=[
                s3.BucketCorsConfigurationV2CorsRuleArgs(
                    allowed_headers=["*"],
                    allowed_methods=["GET", "HEAD"],
                    allowed_origins=["*"],
                    expose_headers=[],
                )
            ],
            opts=child_opts,
        )

        self.objects = [
            s3.BucketObject(
                f"{name}-{site_object.key}",
                bucket=self.bucket.id,
                key=site_object.key,
                source=pulumi.FileAsset(site_object.path),
                content_type=site_object.content_type,
                opts=child_opts,
            )
            for site_object in site_objects
        ]

        self.bucket_id = self.bucket.id
        self.bucket_arn = self.bucket.arn
        self.website_endpoint = website.website_endpoint

        self.register_outputs({
            "bucket_id": self.bucket_id,
            "website_endpoint": self.website_endpoint,
            "object_count": len(self.objects),
        })
