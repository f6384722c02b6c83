import django.db.models.deletion
from django.db import migrations
from django.db import models


def decimal_field():
    return models.DecimalField(
        blank=True,
        decimal_places=10,
        max_digits=28,
        null=True,
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Document",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("effective_time", models.DateField(blank=True, null=True)),
                ("effective_time_low", models.DateField(blank=True, null=True)),
                ("effective_time_high", models.DateField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("document_guid", models.UUIDField(unique=True)),
                ("set_guid", models.UUIDField(blank=True, null=True)),
                ("version_number", models.IntegerField(blank=True, null=True)),
                ("code", models.CharField(blank=True, max_length=50, null=True)),
                (
                    "code_system",
                    models.CharField(blank=True, max_length=100, null=True),
                ),
                ("title", models.TextField(blank=True, null=True)),
            ],
            options={
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="Section",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("effective_time", models.DateField(blank=True, null=True)),
                ("effective_time_low", models.DateField(blank=True, null=True)),
                ("effective_time_high", models.DateField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("section_guid", models.UUIDField()),
                (
                    "section_link_id",
                    models.CharField(blank=True, max_length=255, null=True),
                ),
                ("title", models.TextField(blank=True, null=True)),
                ("code", models.CharField(blank=True, max_length=50, null=True)),
                (
                    "code_system",
                    models.CharField(blank=True, max_length=100, null=True),
                ),
                (
                    "code_system_name",
                    models.CharField(blank=True, max_length=255, null=True),
                ),
                ("display_name", models.TextField(blank=True, null=True)),
                (
                    "document",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sections",
                        to="labels.document",
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="SectionHierarchy",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("sequence_number", models.PositiveIntegerField()),
                (
                    "child_section",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="parent_edges",
                        to="labels.section",
                    ),
                ),
                (
                    "parent_section",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="child_edges",
                        to="labels.section",
                    ),
                ),
            ],
            options={
                "ordering": ("parent_section", "sequence_number"),
            },
        ),
        migrations.AddField(
            model_name="section",
            name="children",
            field=models.ManyToManyField(
                related_name="parents",
                symmetrical=False,
                through="labels.SectionHierarchy",
                through_fields=("parent_section", "child_section"),
                to="labels.section",
            ),
        ),
        migrations.AddConstraint(
            model_name="section",
            constraint=models.UniqueConstraint(
                fields=("document", "section_guid"),
                name="unique_section_guid_per_document",
            ),
        ),
        migrations.AddConstraint(
            model_name="sectionhierarchy",
            constraint=models.UniqueConstraint(
                fields=("parent_section", "child_section"),
                name="unique_section_hierarchy_edge",
            ),
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "product_code",
                    models.CharField(blank=True, max_length=50, null=True),
                ),
                (
                    "product_code_system",
                    models.CharField(blank=True, max_length=100, null=True),
                ),
                ("name", models.TextField(blank=True, null=True)),
                ("form_code", models.CharField(blank=True, max_length=50, null=True)),
                (
                    "form_display_name",
                    models.CharField(blank=True, max_length=255, null=True),
                ),
                (
                    "document",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="products",
                        to="labels.document",
                    ),
                ),
                (
                    "section",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="products",
                        to="labels.section",
                    ),
                ),
            ],
            options={
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="PackagingLevel",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "package_code",
                    models.CharField(blank=True, max_length=50, null=True),
                ),
                (
                    "package_code_system",
                    models.CharField(blank=True, max_length=100, null=True),
                ),
                ("quantity_numerator", decimal_field()),
                (
                    "quantity_unit",
                    models.CharField(blank=True, max_length=50, null=True),
                ),
                (
                    "package_form_code",
                    models.CharField(blank=True, max_length=50, null=True),
                ),
                (
                    "package_form_display_name",
                    models.CharField(blank=True, max_length=255, null=True),
                ),
                (
                    "parent_packaging_level",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="inner_packaging_levels",
                        to="labels.packaginglevel",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="packaging_levels",
                        to="labels.product",
                    ),
                ),
            ],
            options={
                "abstract": False,
            },
        ),
        migrations.CreateModel(
            name="Characteristic",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "characteristic_code",
                    models.CharField(blank=True, max_length=50, null=True),
                ),
                (
                    "characteristic_code_system",
                    models.CharField(blank=True, max_length=100, null=True),
                ),
                ("value_type", models.CharField(blank=True, max_length=20, null=True)),
                ("original_text", models.TextField(blank=True, null=True)),
                ("quantity_value", decimal_field()),
                (
                    "quantity_unit",
                    models.CharField(blank=True, max_length=50, null=True),
                ),
                ("integer_value", models.IntegerField(blank=True, null=True)),
                ("null_flavor", models.CharField(blank=True, max_length=20, null=True)),
                ("interval_low_value", decimal_field()),
                (
                    "interval_low_unit",
                    models.CharField(blank=True, max_length=50, null=True),
                ),
                ("interval_high_value", decimal_field()),
                (
                    "interval_high_unit",
                    models.CharField(blank=True, max_length=50, null=True),
                ),
                ("coded_code", models.CharField(blank=True, max_length=50, null=True)),
                (
                    "coded_code_system",
                    models.CharField(blank=True, max_length=100, null=True),
                ),
                ("coded_display_name", models.TextField(blank=True, null=True)),
                ("string_value", models.TextField(blank=True, null=True)),
                (
                    "media_type",
                    models.CharField(blank=True, max_length=100, null=True),
                ),
                ("media_content", models.TextField(blank=True, null=True)),
                ("boolean_value", models.BooleanField(blank=True, null=True)),
                (
                    "packaging_level",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="characteristics",
                        to="labels.packaginglevel",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="characteristics",
                        to="labels.product",
                    ),
                ),
            ],
            options={
                "abstract": False,
            },
        ),
    ]
